from flask import Flask, Blueprint, jsonify, request, current_app
import os
import json
import logging

import click
from flask.cli import with_appcontext

# Database and models
from models import db
from flask_migrate import Migrate

# Extensions
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from services import (
    RatingsError, InvalidInput,
    select_pair, submit_rating, sync_ratings, export_ratings,
)

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

api = Blueprint('api', __name__)
migrate = Migrate()


# --- HELPER: CLIENT METADATA ---
def client_meta_from_request(req):
    forwarded = req.headers.get('X-Forwarded-For')
    real_ip = req.headers.get('X-Real-IP')
    if forwarded:
        ip_address = forwarded.split(',')[0].strip()
    else:
        ip_address = real_ip or 'unknown'
    return {
        "user_agent": req.headers.get('User-Agent'),
        "ip_address": ip_address,
    }


# --- HELPER: CORS ORIGINS ---
def parse_origins(value):
    return [origin.strip() for origin in value.split(',') if origin.strip()]


# --- API ROUTES ---

@api.route("/ping")
def ping():
    return "pong", 200

## SONG ROUTES ##

@api.route('/songs/random', methods=['GET'])
def random_songs():
    session_id = request.headers.get('X-Session-Id') or None
    selection = select_pair(
        db.session,
        session_id=session_id,
        max_retries=current_app.config['PAIR_RETRY_LIMIT']
    )
    return jsonify({
        "song1": selection.first.to_dict(),
        "song2": selection.second.to_dict()
    })

## RATINGS ROUTES ##

@api.route('/ratings', methods=['POST'])
def create_rating():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput("No data received")

    rating = submit_rating(
        db.session,
        data.get('first'),
        data.get('second'),
        data.get('score'),
        session_id=data.get('sessionId'),
        client_meta=client_meta_from_request(request)
    )
    return jsonify({"success": True, "rating": rating.to_dict()}), 201

@api.route('/ratings/export', methods=['GET'])
def export_ratings_json():
    return jsonify(export_ratings(db.session))


## ERROR HANDLERS ##

def handle_ratings_error(error):
    return jsonify({"error": error.message}), error.status_code

def handle_unexpected_error(error):
    if isinstance(error, HTTPException):
        return jsonify({"error": error.description}), error.code
    current_app.logger.exception("Unhandled error")
    return jsonify({"error": "An internal error occurred"}), 500


## CLI ##

@click.command('sync-ratings')
@click.option('--corpus', 'corpus_path', default=None, help="Corpus JSON file (default: CORPUS_PATH)")
@click.option('--log', 'log_path', default=None, help="Sync log JSON file (default: SYNC_LOG_PATH)")
@with_appcontext
def sync_ratings_command(corpus_path, log_path):
    """Merge collected ratings into the external ratings corpus."""
    corpus_path = corpus_path or current_app.config['CORPUS_PATH']
    log_path = log_path or current_app.config['SYNC_LOG_PATH']
    try:
        summary = sync_ratings(db.session, corpus_path, log_path)
    except RatingsError as e:
        raise click.ClickException(f"Sync failed: {e.message}")
    click.echo(json.dumps(summary.to_dict(), indent=2))


# --- Application Factory ---
def create_app(test_config=None):
    app = Flask(__name__)

    # --- Database Configuration ---
    uri = os.environ.get('DATABASE_URL')
    if uri:
        if uri.startswith("postgres://"):
            uri = uri.replace("postgres://", "postgresql://", 1)
    else:
        uri = f'sqlite:///{os.path.join(BASE_DIR, "ratings.db")}'

    app.config['SQLALCHEMY_DATABASE_URI'] = uri
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # --- Sync & Selection Configuration ---
    app.config['CORPUS_PATH'] = os.environ.get('CORPUS_PATH', os.path.join('data', 'human_ratings.json'))
    app.config['SYNC_LOG_PATH'] = os.environ.get('SYNC_LOG_PATH', os.path.join('data', 'sync_log.json'))
    app.config['PAIR_RETRY_LIMIT'] = int(os.environ.get('PAIR_RETRY_LIMIT', 3))
    app.config['CORS_ORIGINS'] = parse_origins(os.environ.get('CORS_ORIGINS', 'http://localhost:3000'))
    app.config['LOG_LEVEL'] = os.environ.get('LOG_LEVEL', 'INFO')

    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=getattr(logging, app.config['LOG_LEVEL'].upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )

    CORS(app,
         resources={r"/*": {
             "origins": app.config['CORS_ORIGINS'],
             "methods": ["GET", "POST", "OPTIONS"],
             "allow_headers": ["Content-Type", "X-Session-Id"]
         }}
    )

    db.init_app(app)
    migrate.init_app(app, db)

    app.register_blueprint(api)
    app.register_error_handler(RatingsError, handle_ratings_error)
    app.register_error_handler(Exception, handle_unexpected_error)
    app.cli.add_command(sync_ratings_command)

    return app


app = create_app()

if __name__ == '__main__':
    app.run(host="0.0.0.0", port=5000, debug=True)
