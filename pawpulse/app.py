from flask import Flask
from flask_cors import CORS

from pawpulse import config
from pawpulse.models.database import init_db
from pawpulse.routes.analyze import analyze_bp
from pawpulse.routes.training import training_bp
from sound_analysis.utils import setup_logging


def create_app(overrides=None):
    app = Flask(__name__)
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    app.config.update(
        DB_PATH=config.DB_PATH,
        MIN_AUDIO_BYTES=config.MIN_AUDIO_BYTES,
        MAX_AUDIO_BYTES=config.MAX_AUDIO_BYTES,
        DEFAULT_SAMPLE_RATE=config.DEFAULT_SAMPLE_RATE,
        BEHAVIOR_WEIGHT=config.BEHAVIOR_WEIGHT,
    )
    if overrides:
        app.config.update(overrides)

    # base64 inflates the payload by 4/3; leave headroom for the JSON envelope
    app.config['MAX_CONTENT_LENGTH'] = app.config['MAX_AUDIO_BYTES'] * 2

    init_db(app.config['DB_PATH'])

    app.register_blueprint(analyze_bp)
    app.register_blueprint(training_bp)
    return app


if __name__ == '__main__':
    setup_logging(level=config.LOG_LEVEL)
    create_app().run(debug=True, port=5000, threaded=True)
