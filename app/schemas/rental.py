from marshmallow import Schema, fields, validate, INCLUDE

from app.schemas.common_schema import ObjectIdField


class RentalStreakEntrySchema(Schema):
    """기간별 요금 항목. 표시용 필드(기간, 할인 등)는 그대로 보존"""

    class Meta:
        unknown = INCLUDE

    points = fields.Float(required=True, metadata={'description': '적립 포인트'})
    payableFinalAmount = fields.Float(required=True, metadata={'description': '최종 결제 금액'})
    rentalDuration = fields.Integer(required=True, metadata={'description': '대여 일수'})


class BookRentalRequestSchema(Schema):

    class Meta:
        unknown = INCLUDE

    gadget_id = fields.String(required=True, metadata={'description': '대여할 가젯 ID'})
    rentalStreak = fields.List(
        fields.Nested(RentalStreakEntrySchema),
        required=True,
        validate=validate.Length(min=1),
        metadata={'description': '요금 항목 목록 (마지막 항목만 사용자 통계에 반영)'}
    )
    blockedDates = fields.List(
        fields.String(),
        load_default=list,
        metadata={'description': '가젯 캘린더에 추가할 날짜 목록'}
    )


class RentalStreakEntryResponseSchema(Schema):
    points = fields.Float()
    payable_final_amount = fields.Float(data_key='payableFinalAmount')
    rental_duration = fields.Integer(data_key='rentalDuration')
    details = fields.Dict()


class RentalOrderResponseSchema(Schema):
    id = ObjectIdField(data_key='_id', metadata={'description': '주문 ID'})
    gadget_id = fields.String(metadata={'description': '가젯 ID'})
    user_email = fields.String(data_key='userEmail', metadata={'description': '렌터 이메일'})
    rental_streak = fields.List(fields.Nested(RentalStreakEntryResponseSchema), data_key='rentalStreak')
    blocked_dates = fields.List(fields.String(), data_key='blockedDates')
    status = fields.String(metadata={'description': '주문 상태'})
    created_at = fields.DateTime(data_key='createdAt')
