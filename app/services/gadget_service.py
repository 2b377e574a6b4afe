from typing import List

from app.dto.gadget import GadgetCardDto
from app.models.mongodb.gadget import Gadget, GadgetRepository
from app.models.mongodb.user import UserRepository
from common.enum.error_code import APIError
from common.enum.gadget_category import GadgetCategoryEnum
from common.exception.exceptions import BusinessError


class GadgetService:

    FEATURED_PER_CATEGORY = 3

    def __init__(self, db):
        self.gadget_repo = GadgetRepository(db)
        self.user_repo = UserRepository(db)

    @staticmethod
    def _to_card(gadget: Gadget) -> GadgetCardDto:
        return GadgetCardDto(
            id=str(gadget.id),
            name=gadget.name,
            category=gadget.category,
            image=gadget.first_image,
            price_per_day=gadget.price_per_day,
            average_rating=gadget.average_rating,
            description=gadget.description,
            popularity=gadget.total_rental_count
        )

    def get_featured_gadgets(self) -> List[GadgetCardDto]:
        """카테고리별 인기(대여 횟수) 상위 3개, 카테고리 순서대로 이어 붙임"""
        featured = []
        for category in GadgetCategoryEnum:
            gadgets = self.gadget_repo.find_top_by_category(category.value, self.FEATURED_PER_CATEGORY)
            featured.extend(self._to_card(gadget) for gadget in gadgets)
        return featured

    def get_all_gadgets(self) -> List[GadgetCardDto]:
        return [self._to_card(gadget) for gadget in self.gadget_repo.find_all()]

    def get_gadget_details(self, gadget_id: str) -> Gadget:
        gadget = self.gadget_repo.find_by_id(gadget_id)
        if not gadget:
            raise BusinessError(APIError.GADGET_NOT_FOUND)
        return gadget

    def get_wishlist_gadgets(self, email: str) -> List[Gadget]:
        user = self.user_repo.find_by_email(email)
        if not user:
            raise BusinessError(APIError.USER_NOT_FOUND)

        if not user.wishlist:
            return []

        return self.gadget_repo.find_by_ids(user.wishlist)
