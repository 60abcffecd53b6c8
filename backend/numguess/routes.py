from flask import Blueprint, jsonify, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from numguess import db

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the numguess game server!'})

@main.route('/health')
def health():
    try:
        db.session.execute(text('SELECT 1'))
    except SQLAlchemyError:
        current_app.logger.exception("[health] database check failed")
        return jsonify({'status': 'unhealthy', 'database': 'unreachable'}), 503
    return jsonify({'status': 'healthy', 'database': 'ok'})
