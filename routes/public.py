"""
Public routes: liveness and health check
"""
import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify

public_bp = Blueprint('public', __name__)

_STARTED_AT = time.monotonic()


@public_bp.route('/')
def home():
    return "Servidor y API funcionando correctamente"


@public_bp.route('/health')
def health():
    """Uptime monitor endpoint"""
    return jsonify({
        'status': 'OK',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'message': 'Servidor SUTUTEH funcionando correctamente',
        'uptime': round(time.monotonic() - _STARTED_AT, 3),
    })
