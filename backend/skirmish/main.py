from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Skirmish game server!'})

@main.route('/health')
def health():
    sessions = current_app.extensions['skirmish.sessions']
    return jsonify({'status': 'ok', 'games': len(sessions)})
