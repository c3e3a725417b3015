# app.py
import logging
import sys
from contextlib import contextmanager

import click
from flask import Flask
from sqlalchemy.exc import SQLAlchemyError

from config import Config, database_uri
from models import db, MAX_MASTERY
from services import Trainer
from store import WordStore, ImportFormatError


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # 测试配置会直接给出数据库地址，否则按环境变量/用户目录解析
    if not app.config.get('SQLALCHEMY_DATABASE_URI'):
        app.config['SQLALCHEMY_DATABASE_URI'] = database_uri(config_object)

    logging.basicConfig(level=app.config['LOG_LEVEL'], stream=sys.stderr,
                        format='%(levelname)s %(name)s: %(message)s')
    app.logger.setLevel(app.config['LOG_LEVEL'])

    db.init_app(app)

    with app.app_context():
        WordStore().ensure_schema()
    app.logger.debug("database: %s", app.config['SQLALCHEMY_DATABASE_URI'])
    return app


@contextmanager
def storage_errors():
    """把数据库异常转换成命令行错误（退出码 1）"""
    try:
        yield
    except SQLAlchemyError as e:
        raise click.ClickException(f"storage failure: {e}") from e


# --- 命令行入口 ---

@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx):
    """Vocabulary trainer. Run without a command to start a training session."""
    # 测试时通过 obj 传入已经创建好的 app
    if not isinstance(ctx.obj, Flask):
        with storage_errors():
            ctx.obj = create_app()
    ctx.with_resource(ctx.obj.app_context())

    if ctx.invoked_subcommand is None:
        with storage_errors():
            Trainer(WordStore()).run_session()


@cli.command()
@click.argument('term')
@click.argument('translation')
def add(term, translation):
    """Add a word with its translation."""
    with storage_errors():
        try:
            added = WordStore().add(term, translation)
        except ValueError as e:
            raise click.BadParameter(str(e))

    if added:
        click.echo(f"Added: {term.strip()} -> {translation.strip()}")
    else:
        click.echo(f"'{term.strip()}' is already in the dictionary.")


@cli.command()
@click.argument('term')
def remove(term):
    """Remove a word."""
    with storage_errors():
        removed = WordStore().remove(term)

    if removed:
        click.echo(f"Removed: {term}")
    else:
        click.echo(f"Word '{term}' not found in the dictionary.")


@cli.command()
def clear():
    """Delete every word."""
    with storage_errors():
        WordStore().clear()
    click.echo("Dictionary cleared.")


@cli.command('import')
@click.argument('file', type=click.File('rb'))
def import_words(file):
    """Import words from a text file, one `word translation` pair per line."""
    with storage_errors():
        try:
            report = WordStore().import_text(file.read())
        except ImportFormatError as e:
            raise click.ClickException(str(e))

    click.echo(f"Imported {report.added} new words "
               f"(skipped: {report.duplicates} duplicates, "
               f"{report.missing_translation} lines without translation).")


@cli.command('list')
def list_words():
    """Show every word with its mastery level."""
    with storage_errors():
        words = WordStore().all()

    if not words:
        click.echo("Dictionary is empty.")
        return
    for w in words:
        click.echo(f"{w.term} -> {w.translation} [{w.mastery}/{MAX_MASTERY}]")


def main():
    cli(prog_name='vocab-drill')


if __name__ == '__main__':
    main()
