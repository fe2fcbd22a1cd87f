from flask_sqlalchemy import SQLAlchemy
from werkzeug.security import generate_password_hash, check_password_hash


db = SQLAlchemy()

AUTH_ACCESS = 'auth'


class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(254), unique=True, nullable=False)
    password = db.Column(db.String(256), nullable=False)
    tokens = db.relationship('AuthToken', backref='user', lazy=True,
                             order_by='AuthToken.id', cascade='all, delete-orphan')
    todos = db.relationship('Todo', backref='creator', lazy=True)

    def set_password(self, password):
        self.password = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password, password)

    def add_token(self, token, access=AUTH_ACCESS):
        self.tokens.append(AuthToken(access=access, token=token))

    def remove_token(self, token):
        """Drop every stored token with this value; absent tokens are ignored."""
        for auth_token in [t for t in self.tokens if t.token == token]:
            self.tokens.remove(auth_token)

    def has_token(self, token, access=AUTH_ACCESS):
        return any(t.token == token and t.access == access for t in self.tokens)

    @classmethod
    def find_by_credentials(cls, email, password):
        # Unknown email and wrong password look the same to the caller
        user = cls.query.filter_by(email=email).first()
        if user and user.check_password(password):
            return user
        return None

    def to_dict(self):
        return {'_id': self.id, 'email': self.email}

    def __repr__(self):
        return f'<User {self.email}>'


class AuthToken(db.Model):
    __tablename__ = 'auth_token'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    access = db.Column(db.String(20), nullable=False, default=AUTH_ACCESS)
    token = db.Column(db.String(512), nullable=False, index=True)


class Todo(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    text = db.Column(db.String(1000), nullable=False)
    completed = db.Column(db.Boolean, nullable=False, default=False)
    # epoch milliseconds
    completed_at = db.Column(db.BigInteger, nullable=True, default=None)
    creator_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)

    def to_dict(self):
        return {
            '_id': self.id,
            'text': self.text,
            'completed': self.completed,
            'completedAt': self.completed_at,
            '_creator': self.creator_id,
        }

    def __repr__(self):
        return f'<Todo {self.id} {self.text!r}>'
