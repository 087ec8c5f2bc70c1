from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)

# 1x1 PNG used by the classifier smoke test
SAMPLE_SNAPSHOT = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8/x8AAwMCAO+ip1sAAAAASUVORK5CYII="


def create_app(config_class=Config, scheduler=None, classifier=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')

    CORS(flask_app, supports_credentials=True, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Game services live on the app so tests can build isolated instances
    from inkthink.notifier import SocketIONotifier
    from inkthink.registry import RoomRegistry
    from inkthink.services.classifier import build_classifier
    from inkthink.services.games import build_services
    from inkthink.services.games.timer import SocketIOScheduler

    if scheduler is None:
        scheduler = SocketIOScheduler(socketio, logger=flask_app.logger)
    if classifier is None:
        classifier = build_classifier(flask_app.config, logger=flask_app.logger)
    flask_app.extensions['inkthink'] = build_services(
        RoomRegistry(),
        SocketIONotifier(socketio, namespace=namespace),
        scheduler,
        classifier,
        flask_app.config,
        logger=flask_app.logger,
    )

    from inkthink.main import main
    flask_app.register_blueprint(main)

    from inkthink.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    @click.command('classifier-check')
    @click.option('--word', default='apple', help='Word the sample sketch is supposed to show.')
    def classifier_check_command(word):
        """Sends a tiny sample image to the configured classifier."""
        detector = flask_app.extensions['inkthink'].cheat_detector
        click.echo(f"Classifier: {type(detector.classifier).__name__}")
        try:
            verdict = detector.classifier.classify(SAMPLE_SNAPSHOT, word)
        except Exception as exc:
            raise click.ClickException(f"Classifier call failed: {exc}")
        click.echo(f"Verdict: {verdict.verdict} ({verdict.description})")

    flask_app.cli.add_command(classifier_check_command)

    return flask_app
