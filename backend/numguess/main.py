from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from numguess import db
from numguess.models import User
from numguess.services.games.statistics import get_or_create
from numguess.validators import validate_registration

auth = Blueprint('auth', __name__)

@auth.route('/register', methods=['POST'])
def register():
    data, errors = validate_registration(request.get_json(silent=True))
    if errors:
        return jsonify({"success": False, "error": "validation_failed", "message": "Registration failed", "errors": errors}), 400
    if User.query.filter_by(username=data['username']).first():
        return jsonify({"success": False, "error": "validation_failed", "message": "Username already exists"}), 400

    new_user = User(username=data['username'], display_name=data['display_name'])
    new_user.set_password(data['password'])
    db.session.add(new_user)
    db.session.flush()
    get_or_create(new_user.id)
    db.session.commit()
    login_user(new_user)
    current_app.logger.info(f"[register] user={new_user.id} username={new_user.username}")
    return jsonify({"success": True, "data": new_user.to_dict()}), 201

@auth.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = User.query.filter_by(username=data.get('username')).first()
    if user and user.check_password(data.get('password') or ''):
        login_user(user, remember=bool(data.get('remember_me')))
        current_app.logger.info(f"[login] user={user.id}")
        return jsonify({"success": True, "data": user.to_dict()})
    current_app.logger.warning(f"[login-failed] username={data.get('username')}")
    return jsonify({"success": False, "error": "unauthorized", "message": "Invalid credentials"}), 401

@auth.route('/check_login', methods=['GET'])
@login_required
def check_login():
    return jsonify({"success": True, "data": current_user.to_dict()})

@auth.route('/logout', methods=['POST'])
@login_required
def logout():
    current_app.logger.info(f"[logout] user={current_user.id}")
    logout_user()
    return jsonify({"success": True})

@auth.route('/profile', methods=['GET'])
@login_required
def profile():
    stats = get_or_create(current_user.id)
    db.session.commit()
    payload = current_user.to_dict()
    payload['stats'] = stats.to_dict()
    return jsonify({"success": True, "data": payload})
