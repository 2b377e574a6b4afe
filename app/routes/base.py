from datetime import datetime

from flask_smorest import Blueprint

base_blueprint = Blueprint(
    'base',
    __name__,
    url_prefix='/',
    description='기본 상태 확인 엔드포인트'
)


@base_blueprint.route('', methods=['GET'])
def base_endpoint():
    return {
        "status": "ok",
        "service": "gadgetswap",
        "message": "GadgetSwap Rental Marketplace Application Server Side is running!",
        "time": datetime.utcnow().isoformat()
    }
