from marshmallow import Schema, fields, validate

from app.schemas.common_schema import ObjectIdField


class SendMessageRequestSchema(Schema):
    message = fields.String(
        required=True,
        validate=validate.Length(min=1, max=2000),
        metadata={'description': '메시지 내용'}
    )


class MessageSchema(Schema):
    sender = fields.Function(lambda message: message.sender.value, metadata={'description': '보낸 쪽 (user, admin)'})
    sender_email = fields.String(data_key='senderEmail')
    message = fields.String()
    sent_at = fields.DateTime(data_key='sentAt')


class MessageChainResponseSchema(Schema):
    id = ObjectIdField(data_key='_id')
    user_email = fields.String()
    messages = fields.List(fields.Nested(MessageSchema), data_key='message_chain')
    total_count = fields.Integer()
    unread_by_user_count = fields.Integer(data_key='unreadByUser_count')
    unread_by_admin_count = fields.Integer(data_key='unreadByAdmin_count')
    last_read_by_user_at = fields.DateTime(data_key='lastReadByUser_at', allow_none=True)
    last_read_by_admin_at = fields.DateTime(data_key='lastReadByAdmin_at', allow_none=True)


class MessageChainSummarySchema(Schema):
    id = ObjectIdField(data_key='_id')
    user_email = fields.String()
    total_count = fields.Integer()
    unread_by_admin_count = fields.Integer(data_key='unreadByAdmin_count')
    last_read_by_admin_at = fields.DateTime(data_key='lastReadByAdmin_at', allow_none=True)


class MessageChainListRequestSchema(Schema):
    only_unread = fields.Boolean(load_default=False, metadata={'description': '관리자가 읽지 않은 체인만 조회'})
