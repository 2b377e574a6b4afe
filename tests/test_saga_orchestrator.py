import pytest
from pymongo.errors import PyMongoError

from app.models.mongodb.saga_transaction_log import SagaTransactionLogRepository, SagaStatus, StepStatus
from common.exception.exceptions import SagaCompensationError
from common.saga import SagaOrchestrator


@pytest.fixture
def saga_repo(db):
    return SagaTransactionLogRepository(db)


def test_all_steps_succeed(saga_repo):
    calls = []
    orchestrator = SagaOrchestrator(saga_repo, 'test_saga')
    orchestrator.add_step(
        name='first',
        execute=lambda ctx: calls.append('first') or {'id': 1},
        compensate=lambda data: calls.append('undo_first'),
        extract_compensation_data=lambda result: result
    ).add_step(
        name='second',
        execute=lambda ctx: ctx.get_result('first')['id'] + 1
    )

    success, error = orchestrator.execute()

    assert success is True
    assert error is None
    assert calls == ['first']
    assert orchestrator.context.get_result('second') == 2

    saga_log = saga_repo.find_by_transaction_id(orchestrator.transaction_id)
    assert saga_log.status == SagaStatus.COMPLETED
    assert saga_log.saga_name == 'test_saga'
    assert [step.status for step in saga_log.steps] == [StepStatus.COMPLETED, StepStatus.COMPLETED]
    assert saga_log.steps[0].compensation_data == {'id': 1}


def test_failure_compensates_completed_steps_in_reverse(saga_repo):
    calls = []
    failure = RuntimeError("step three exploded")

    def explode(ctx):
        raise failure

    orchestrator = SagaOrchestrator(saga_repo, 'test_saga')
    orchestrator.add_step(
        name='first',
        execute=lambda ctx: 'a',
        compensate=lambda data: calls.append(('undo_first', data)),
        extract_compensation_data=lambda result: {'value': result}
    ).add_step(
        name='second',
        execute=lambda ctx: 'b',
        compensate=lambda data: calls.append(('undo_second', data)),
        extract_compensation_data=lambda result: {'value': result}
    ).add_step(
        name='third',
        execute=explode,
        compensate=lambda data: calls.append(('undo_third', data))
    )

    success, error = orchestrator.execute()

    assert success is False
    assert error is failure
    assert calls == [('undo_second', {'value': 'b'}), ('undo_first', {'value': 'a'})]

    saga_log = saga_repo.find_by_transaction_id(orchestrator.transaction_id)
    assert saga_log.status == SagaStatus.COMPENSATED
    assert [step.status for step in saga_log.steps] == [
        StepStatus.COMPENSATED, StepStatus.COMPENSATED, StepStatus.FAILED
    ]
    assert saga_log.steps[2].error_message == "step three exploded"


def test_compensation_failure_is_reported_distinctly(saga_repo):
    calls = []
    failure = RuntimeError("boom")

    def broken_compensation(data):
        raise RuntimeError("cannot undo")

    def explode(ctx):
        raise failure

    orchestrator = SagaOrchestrator(saga_repo, 'test_saga')
    orchestrator.add_step(
        name='first',
        execute=lambda ctx: 'a',
        compensate=lambda data: calls.append('undo_first')
    ).add_step(
        name='second',
        execute=lambda ctx: 'b',
        compensate=broken_compensation
    ).add_step(
        name='third',
        execute=explode
    )

    success, error = orchestrator.execute()

    assert success is False
    assert isinstance(error, SagaCompensationError)
    assert error.failed_steps == ['second']
    assert error.original_error is failure
    assert error.transaction_id == orchestrator.transaction_id
    # 하나의 보상이 실패해도 나머지 보상은 계속 시도
    assert calls == ['undo_first']

    saga_log = saga_repo.find_by_transaction_id(orchestrator.transaction_id)
    assert saga_log.status == SagaStatus.FAILED
    assert saga_log.steps[1].status == StepStatus.COMPENSATION_FAILED
    assert saga_log.steps[0].status == StepStatus.COMPENSATED


def test_first_step_failure_has_nothing_to_compensate(saga_repo):
    failure = ValueError("invalid")

    def explode(ctx):
        raise failure

    orchestrator = SagaOrchestrator(saga_repo, 'test_saga').add_step(name='only', execute=explode)

    success, error = orchestrator.execute()

    assert success is False
    assert error is failure
    assert saga_repo.find_by_transaction_id(orchestrator.transaction_id).status == SagaStatus.COMPENSATED


def test_log_write_failure_before_a_step_compensates_earlier_steps(saga_repo):
    calls = []
    update_step = saga_repo.update_step

    def fail_when_second_step_starts(transaction_id, step_index, update_data):
        if step_index == 1 and update_data.get('status') == StepStatus.PENDING.value:
            raise PyMongoError("saga log unavailable")
        return update_step(transaction_id, step_index, update_data)

    saga_repo.update_step = fail_when_second_step_starts

    orchestrator = SagaOrchestrator(saga_repo, 'test_saga')
    orchestrator.add_step(
        name='first',
        execute=lambda ctx: calls.append('first'),
        compensate=lambda data: calls.append('undo_first')
    ).add_step(
        name='second',
        execute=lambda ctx: calls.append('second')
    )

    success, error = orchestrator.execute()

    assert success is False
    assert isinstance(error, PyMongoError)
    assert orchestrator.failed_step == 'second'
    assert calls == ['first', 'undo_first']
    assert saga_repo.find_by_transaction_id(orchestrator.transaction_id).status == SagaStatus.COMPENSATED


def test_completion_write_failure_rolls_back_instead_of_leaving_saga_in_progress(saga_repo):
    calls = []

    def fail_completion(transaction_id):
        raise PyMongoError("saga log unavailable")

    saga_repo.complete_saga = fail_completion

    orchestrator = SagaOrchestrator(saga_repo, 'test_saga').add_step(
        name='only',
        execute=lambda ctx: calls.append('only'),
        compensate=lambda data: calls.append('undo_only')
    )

    success, error = orchestrator.execute()

    assert success is False
    assert isinstance(error, PyMongoError)
    assert calls == ['only', 'undo_only']
    assert saga_repo.find_by_transaction_id(orchestrator.transaction_id).status == SagaStatus.COMPENSATED


def test_unrecorded_compensation_is_reported_and_remaining_steps_still_run(saga_repo):
    calls = []
    mark_step_compensated = saga_repo.mark_step_compensated

    def fail_for_second(transaction_id, step_index):
        if step_index == 1:
            raise PyMongoError("saga log unavailable")
        return mark_step_compensated(transaction_id, step_index)

    saga_repo.mark_step_compensated = fail_for_second

    def explode(ctx):
        raise RuntimeError("boom")

    orchestrator = SagaOrchestrator(saga_repo, 'test_saga')
    orchestrator.add_step(
        name='first',
        execute=lambda ctx: 'a',
        compensate=lambda data: calls.append('undo_first')
    ).add_step(
        name='second',
        execute=lambda ctx: 'b',
        compensate=lambda data: calls.append('undo_second')
    ).add_step(
        name='third',
        execute=explode
    )

    success, error = orchestrator.execute()

    assert success is False
    assert isinstance(error, SagaCompensationError)
    assert error.failed_steps == ['second']
    assert calls == ['undo_second', 'undo_first']
    assert saga_repo.find_by_transaction_id(orchestrator.transaction_id).status == SagaStatus.FAILED
