from flask import Blueprint, current_app, jsonify, send_from_directory

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({
        'message': 'Welcome to the voice relay server!',
        'default_game_code': current_app.config.get('DEFAULT_GAME_CODE'),
    })

@main.route('/uploads/<path:filename>')
def uploaded_clip(filename):
    # send_from_directory rejects paths escaping the upload dir
    return send_from_directory(current_app.config['UPLOAD_DIR'], filename)
