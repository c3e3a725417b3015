# config.py
import os

import click


class Config:
    APP_NAME = 'vocab-drill'
    DB_FILENAME = 'words.db'
    # 设置该环境变量可以直接指定数据库文件
    DB_PATH_ENV = 'VOCAB_DRILL_DB_PATH'

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv('VOCAB_DRILL_LOG_LEVEL', 'WARNING')


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    LOG_LEVEL = 'DEBUG'


def resolve_db_path(config=Config):
    """确定数据库文件位置：环境变量优先，否则放在用户配置目录下"""
    override = os.getenv(config.DB_PATH_ENV)
    if override:
        return override

    config_dir = click.get_app_dir(config.APP_NAME)
    os.makedirs(config_dir, exist_ok=True)
    return os.path.join(config_dir, config.DB_FILENAME)


def database_uri(config=Config):
    return f"sqlite:///{resolve_db_path(config)}"
