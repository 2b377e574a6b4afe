from marshmallow import Schema, fields


class SuccessResponseSchema(Schema):
    result = fields.String(dump_default="success", metadata={'description': '성공 여부'})
    message = fields.String(metadata={'description': '안내 메시지'})


class ObjectIdField(fields.Field):
    """ObjectId -> 문자열 직렬화"""

    def _serialize(self, value, attr, obj, **kwargs):
        if value is None:
            return None
        return str(value)
