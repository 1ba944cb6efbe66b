"""Attendance verification service - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"]
)

def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from attendance_api.config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Face detector is chosen once per process
    setup_face_detector(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'Attendance Verification API',
            'version': '1.0.0',
            'face_detector': app.extensions['face_detector'].kind
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from attendance_api.api.auth import auth_bp
    from attendance_api.api.sessions import sessions_bp
    from attendance_api.api.attendance import attendance_bp
    from attendance_api.api.faces import faces_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(sessions_bp, url_prefix='/api/sessions')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')
    app.register_blueprint(faces_bp, url_prefix='/api/faces')

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from attendance_api.utils.errors import AttendanceError
    from attendance_api.utils.helpers import handle_error, error_response
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(AttendanceError)
    def attendance_error(error):
        db.session.rollback()
        return error_response(error.message, error.status_code, reason=error.reason, **error.details)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e.description, e.code)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error('Unhandled error: %s', error)
        return handle_error('Internal server error', 500)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({
            'error': True,
            'message': 'Token has expired',
            'status_code': 401
        }), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Invalid token',
            'status_code': 401
        }), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Authorization token required',
            'status_code': 401
        }), 401

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO').upper(), logging.INFO)
    app.logger.setLevel(level)

    if not app.debug and not app.testing:
        log_dir = app.config.get('LOG_DIR', 'logs')
        if not os.path.exists(log_dir):
            os.mkdir(log_dir)

        file_handler = logging.FileHandler(os.path.join(log_dir, 'app.log'))
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)

        app.logger.info('Attendance Verification API startup')

def setup_face_detector(app: Flask) -> None:
    """Select the face detector variant for the lifetime of the app."""
    from attendance_api.services.face_service import build_detector

    detector = build_detector(
        app.config.get('FACE_DETECTOR', 'client'),
        app.config['FACE_EMBEDDING_LENGTH']
    )
    if detector.kind == 'mock':
        if not app.config.get('ALLOW_MOCK_FACE_DETECTOR', True):
            raise RuntimeError('Mock face detector is not allowed in this environment')
        app.logger.warning('Mock face detector enabled: embeddings are random, demo use only')
    else:
        app.logger.info('Face detector: %s', detector.kind)

    app.extensions['face_detector'] = detector

def setup_database(app: Flask) -> None:
    """Import models so metadata knows every table."""
    with app.app_context():
        from attendance_api.models import (  # noqa: F401
            User, UserRole, AttendanceSession, AttendanceRecord,
            AttendanceStatus, FaceEmbedding
        )

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('seed-db')
    def seed_db():
        """Seed database with demo users."""
        from attendance_api.services.seed_service import SeedService

        created = SeedService.seed_users()
        for email, password in created:
            click.echo(f'Created {email} / {password}')
        click.echo('Database seeded successfully!')

    @app.cli.command('create-admin')
    def create_admin():
        """Create admin user."""
        email = click.prompt('Admin email')
        name = click.prompt('Admin name')
        password = click.prompt('Password', hide_input=True)

        from attendance_api.models.user import User, UserRole

        admin = User(
            email=email.lower().strip(),
            name=name,
            role=UserRole.ADMIN
        )
        admin.set_password(password)

        try:
            db.session.add(admin)
            db.session.commit()
            click.echo(f'Admin user created: {email}')
        except Exception as e:
            db.session.rollback()
            click.echo(f'Error creating admin: {str(e)}')

    @app.cli.command('expire-sessions')
    def expire_sessions():
        """Deactivate sessions whose QR code has expired."""
        from attendance_api.models.session import AttendanceSession

        count = AttendanceSession.expire_stale()
        click.echo(f'Deactivated {count} expired session(s).')
