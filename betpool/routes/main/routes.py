from datetime import datetime, timezone

from flask import jsonify

from betpool import db
from betpool.routes.main import bp
from betpool.utils.cache_utils import get_cache_stats


@bp.route("/health")
def health():
    """Health check endpoint for load balancers"""
    db.session.execute(db.text("SELECT 1"))
    return jsonify(
        {
            "success": True,
            "message": "healthy",
            "data": {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "cache": get_cache_stats(),
            },
        }
    )
