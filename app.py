import time

import click
from flask import Blueprint, Flask, abort, current_app, g, jsonify, request
from flask.cli import with_appcontext
from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError

from auth import authenticate, generate_auth_token
from config import get_config
from errors import AuthenticationError, ValidationError, register_error_handlers
from models import db, User, Todo
from schemas import LoginCredentials, TodoCreate, TodoUpdate, UserCredentials

todos_bp = Blueprint('todos', __name__, url_prefix='/todos')
users_bp = Blueprint('users', __name__, url_prefix='/users')


def create_app(config_name=None, overrides=None):
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)
    app.logger.setLevel(str(app.config['LOG_LEVEL']).upper())

    db.init_app(app)
    register_error_handlers(app)
    app.register_blueprint(todos_bp)
    app.register_blueprint(users_bp)
    app.cli.add_command(init_db_command)

    with app.app_context():
        db.create_all()

    app.logger.info('Using database %s', app.config['SQLALCHEMY_DATABASE_URI'])
    return app


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Drop and recreate all tables."""
    db.drop_all()
    db.create_all()
    click.echo('Initialized the database.')


def request_body():
    return request.get_json(silent=True)


def epoch_millis():
    return int(time.time() * 1000)


def _todo_id(raw_id):
    # Malformed ids never reach the store and answer like a missing todo
    if not (raw_id.isascii() and raw_id.isdigit()) or len(raw_id) > 18:
        abort(404)
    return int(raw_id)


def _owned_todo(todo_id):
    return Todo.query.filter_by(id=todo_id, creator_id=g.user.id).first_or_404()


@todos_bp.route('', methods=['POST'])
@authenticate
def create_todo():
    body = TodoCreate.parse(request_body())
    current_app.logger.debug('New todo body: %s', body)
    todo = Todo(text=body.text, completed=False, completed_at=None, creator_id=g.user.id)
    db.session.add(todo)
    db.session.commit()
    current_app.logger.info('User %s created todo %s', g.user.id, todo.id)
    return jsonify(todo.to_dict())


@todos_bp.route('', methods=['GET'])
@authenticate
def list_todos():
    todos = Todo.query.filter_by(creator_id=g.user.id).order_by(Todo.id).all()
    return jsonify({'todos': [todo.to_dict() for todo in todos]})


@todos_bp.route('/<todo_id>', methods=['GET'])
@authenticate
def get_todo(todo_id):
    return jsonify({'todo': _owned_todo(_todo_id(todo_id)).to_dict()})


@todos_bp.route('/<todo_id>', methods=['DELETE'])
@authenticate
def delete_todo(todo_id):
    todo = _owned_todo(_todo_id(todo_id))
    removed = todo.to_dict()

    result = db.session.execute(
        delete(Todo)
        .where(Todo.id == todo.id, Todo.creator_id == g.user.id)
        .execution_options(synchronize_session='evaluate'))
    if result.rowcount == 0:
        db.session.rollback()
        abort(404)
    db.session.commit()

    current_app.logger.info('User %s deleted todo %s', g.user.id, removed['_id'])
    return jsonify({'todo': removed})


@todos_bp.route('/<todo_id>', methods=['PATCH'])
@authenticate
def update_todo(todo_id):
    todo = _owned_todo(_todo_id(todo_id))
    body = TodoUpdate.parse(request_body())

    changes = {}
    if body.text is not None:
        changes['text'] = body.text
    # completedAt is always derived, never taken from the client
    if body.completed is True:
        changes.update(completed=True, completed_at=epoch_millis())
    else:
        changes.update(completed=False, completed_at=None)

    result = db.session.execute(
        update(Todo)
        .where(Todo.id == todo.id, Todo.creator_id == g.user.id)
        .values(**changes)
        .execution_options(synchronize_session='evaluate'))
    if result.rowcount == 0:
        db.session.rollback()
        abort(404)
    db.session.refresh(todo)
    updated = todo.to_dict()
    db.session.commit()
    return jsonify({'todo': updated})


def _with_token(user, token):
    response = jsonify(user.to_dict())
    response.headers[current_app.config['AUTH_HEADER']] = token
    return response


@users_bp.route('', methods=['POST'])
def create_user():
    body = UserCredentials.parse(request_body())
    user = User(email=body.email)
    user.set_password(body.password)
    db.session.add(user)
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError({'email': 'Email already registered'})

    token = generate_auth_token(user)
    db.session.commit()
    current_app.logger.info('Registered user %s', user.id)
    return _with_token(user, token)


@users_bp.route('/login', methods=['POST'])
def login():
    try:
        body = LoginCredentials.parse(request_body())
        user = User.find_by_credentials(body.email, body.password)
        if user is None:
            raise AuthenticationError()
    except (ValidationError, AuthenticationError):
        current_app.logger.warning('Failed login attempt')
        abort(400)

    token = generate_auth_token(user)
    db.session.commit()
    current_app.logger.info('User %s logged in', user.id)
    return _with_token(user, token)


@users_bp.route('/me/token', methods=['DELETE'])
@authenticate
def logout():
    g.user.remove_token(g.token)
    db.session.commit()
    current_app.logger.info('User %s logged out', g.user.id)
    return '', 200


@users_bp.route('/me', methods=['GET'])
@authenticate
def current_user():
    return jsonify(g.user.to_dict())


if __name__ == '__main__':
    app = create_app()
    app.logger.info('Listening on port %s', app.config['PORT'])
    app.run(port=app.config['PORT'], debug=app.config['DEBUG'])
