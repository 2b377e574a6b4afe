from flask import g
from flask_smorest import Blueprint

from app.schemas.message import SendMessageRequestSchema, MessageChainResponseSchema
from app.services import get_message_service
from common.decorator.auth_decorators import login_required

messages_blueprint = Blueprint(
    'messages',
    __name__,
    url_prefix='/api/v1/messages',
    description='사용자 메시지 API'
)


@messages_blueprint.route('/me', methods=['GET'])
@login_required
@messages_blueprint.response(200, MessageChainResponseSchema)
@messages_blueprint.doc(security=[{"BearerAuth": []}])
def get_my_message_chain():
    return get_message_service().get_message_chain(g.identity.email)


@messages_blueprint.route('/me', methods=['POST'])
@login_required
@messages_blueprint.arguments(SendMessageRequestSchema)
@messages_blueprint.response(201, MessageChainResponseSchema)
@messages_blueprint.doc(security=[{"BearerAuth": []}])
def send_message(data):
    # NOTE : 사용자 본인 체인에만 추가 (관리자 답장은 /admin 경로)
    return get_message_service().append_message(g.identity.email, data['message'], g.identity)


@messages_blueprint.route('/me/read', methods=['PATCH'])
@login_required
@messages_blueprint.response(200, MessageChainResponseSchema)
@messages_blueprint.doc(security=[{"BearerAuth": []}])
def mark_my_chain_read():
    return get_message_service().mark_read(g.identity.email, g.identity)
