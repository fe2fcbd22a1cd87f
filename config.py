import os


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'clave_super_segura')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///todos.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PORT = int(os.getenv('PORT', 3000))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    AUTH_HEADER = 'x-auth'
    TESTING = False
    DEBUG = False


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    LOG_LEVEL = 'WARNING'


class ProductionConfig(Config):
    pass


configs = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}


def get_config(name=None):
    """Return the config class for ``name``, falling back to ``APP_ENV``."""
    name = name or os.getenv('APP_ENV', 'development')
    try:
        return configs[name]
    except KeyError:
        raise ValueError(f'Unknown config {name!r}, expected one of {sorted(configs)}') from None

