from flask import g
from flask_smorest import Blueprint

from app.schemas.common_schema import SuccessResponseSchema
from app.schemas.user import SignupRequestSchema, OnboardingResponseSchema, WishlistToggleRequestSchema, \
    WishlistResponseSchema, NotificationChainResponseSchema, ActivityHistoryChainResponseSchema
from app.services import get_user_service
from common.decorator.auth_decorators import login_required, public_route

users_blueprint = Blueprint(
    'users',
    __name__,
    url_prefix='/api/v1/users',
    description='사용자 관련 API'
)


@users_blueprint.route('/signup', methods=['POST'])
@public_route
@users_blueprint.arguments(SignupRequestSchema)
@users_blueprint.response(201, OnboardingResponseSchema)
def signup(data):
    return get_user_service().onboard_user(data)


@users_blueprint.route('/me', methods=['GET'])
@login_required
@users_blueprint.response(200)
@users_blueprint.doc(security=[{"BearerAuth": []}])
def get_my_profile():
    return get_user_service().get_full_user_profile(g.identity.email)


@users_blueprint.route('/me', methods=['DELETE'])
@login_required
@users_blueprint.response(200, SuccessResponseSchema)
@users_blueprint.doc(security=[{"BearerAuth": []}])
def delete_my_account():
    get_user_service().offboard_user(g.identity.email)
    return {
        "result": "success",
        "message": "회원 탈퇴가 완료되었습니다."
    }


@users_blueprint.route('/me/wishlist', methods=['POST'])
@login_required
@users_blueprint.arguments(WishlistToggleRequestSchema)
@users_blueprint.response(200, WishlistResponseSchema)
@users_blueprint.doc(security=[{"BearerAuth": []}])
def toggle_wishlist(data):
    return get_user_service().toggle_wishlist(g.identity.email, data['gadget_id'])


@users_blueprint.route('/me/notifications', methods=['GET'])
@login_required
@users_blueprint.response(200, NotificationChainResponseSchema)
@users_blueprint.doc(security=[{"BearerAuth": []}])
def get_my_notifications():
    return get_user_service().get_notification_chain(g.identity.email)


@users_blueprint.route('/me/activity-history', methods=['GET'])
@login_required
@users_blueprint.response(200, ActivityHistoryChainResponseSchema)
@users_blueprint.doc(security=[{"BearerAuth": []}])
def get_my_activity_history():
    return get_user_service().get_activity_history_chain(g.identity.email)
