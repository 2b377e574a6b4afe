from marshmallow import Schema, fields


class GadgetCardSchema(Schema):
    id = fields.String(metadata={'description': '가젯 ID'})
    name = fields.String(metadata={'description': '가젯 이름'})
    category = fields.String(metadata={'description': '카테고리'})
    image = fields.String(allow_none=True, metadata={'description': '대표 이미지 (첫 번째 이미지)'})
    price_per_day = fields.Float(data_key='pricePerDay', allow_none=True, metadata={'description': '일일 대여료'})
    average_rating = fields.Float(metadata={'description': '평균 평점'})
    description = fields.String(metadata={'description': '설명'})
    popularity = fields.Integer(metadata={'description': '인기도 (totalRentalCount)'})
