from marshmallow import Schema, fields, INCLUDE

from app.schemas.common_schema import ObjectIdField


class SignupRequestSchema(Schema):
    """
    외부 인증 후 프론트엔드가 보내는 신규 사용자 레코드
    email 외의 프로필 필드(name, photo 등)는 그대로 저장된다.
    """

    class Meta:
        unknown = INCLUDE

    email = fields.Email(required=True, metadata={'description': '이메일 (고유)'})


class OnboardingResponseSchema(Schema):
    user_id = fields.String(data_key='userId', metadata={'description': '생성된 사용자 ID'})
    message_chain_id = fields.String(data_key='messageChain_id', metadata={'description': '메시지 체인 ID'})
    notification_chain_id = fields.String(data_key='notificationChain_id', metadata={'description': '알림 체인 ID'})
    activity_history_chain_id = fields.String(
        data_key='activityHistoryChain_id',
        metadata={'description': '활동 기록 체인 ID'}
    )


class WishlistToggleRequestSchema(Schema):
    gadget_id = fields.String(required=True, data_key='gadgetId', metadata={'description': '가젯 ID'})


class WishlistResponseSchema(Schema):
    wishlist = fields.List(fields.String(), metadata={'description': '변경 후 위시리스트 (가젯 ID 목록)'})
    added = fields.Boolean(metadata={'description': 'True: 추가됨, False: 제거됨'})
    message = fields.String(metadata={'description': '안내 메시지'})


class NotificationChainResponseSchema(Schema):
    id = ObjectIdField(data_key='_id')
    user_email = fields.String()
    notifications = fields.List(fields.Dict(), data_key='notification_chain')
    total_count = fields.Integer()
    unread_count = fields.Integer()


class ActivityHistoryChainResponseSchema(Schema):
    id = ObjectIdField(data_key='_id')
    user_email = fields.String()
    activities = fields.List(fields.Dict(), data_key='activityHistory_chain')
