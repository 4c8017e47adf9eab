from flask import Blueprint, jsonify
from sqlalchemy import text
from drawguess import db
from drawguess.models import Room

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Draw & Guess room server!'})

@main.route('/health')
def health():
    db.session.execute(text('SELECT 1'))
    return jsonify({
        'status': 'ok',
        'rooms': Room.query.count(),
        'playing': Room.query.filter_by(status='playing').count(),
    })

@main.app_errorhandler(404)
def not_found(exc):
    return jsonify({'error': 'Not found'}), 404
