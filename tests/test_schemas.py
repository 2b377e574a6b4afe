import pytest
from marshmallow import ValidationError

from app.schemas.rental import BookRentalRequestSchema, RentalOrderResponseSchema


def test_rental_request_accepts_fractional_amounts_and_keeps_extra_fields():
    data = BookRentalRequestSchema().load({
        'gadget_id': '65f000000000000000000001',
        'rentalStreak': [
            {'points': 12.5, 'payableFinalAmount': 49.99, 'rentalDuration': 2, 'discount': '10%'}
        ]
    })

    entry = data['rentalStreak'][0]
    assert entry['points'] == 12.5
    assert entry['payableFinalAmount'] == 49.99
    assert entry['discount'] == '10%'
    assert data['blockedDates'] == []


def test_rental_request_rejects_non_numeric_amount():
    with pytest.raises(ValidationError) as exc_info:
        BookRentalRequestSchema().load({
            'gadget_id': '65f000000000000000000001',
            'rentalStreak': [{'points': 'many', 'payableFinalAmount': 10, 'rentalDuration': 1}]
        })

    assert 'rentalStreak' in exc_info.value.messages


def test_rental_order_response_dumps_amounts():
    dumped = RentalOrderResponseSchema().dump({
        'gadget_id': 'g1',
        'user_email': 'member@example.com',
        'rental_streak': [{'points': 25, 'payable_final_amount': 99.5, 'rental_duration': 3}],
        'blocked_dates': []
    })

    assert dumped['rentalStreak'][0]['points'] == 25.0
    assert dumped['rentalStreak'][0]['payableFinalAmount'] == 99.5
