"""
tests/conftest.py
公共 fixture：测试用 app、内存数据库、假的 WordStore、自动答题的终端
"""
import random
from dataclasses import replace

import pytest

from app import create_app
from config import TestConfig
from models import db, WordCard
from store import WordStore


@pytest.fixture(scope='session')
def app():
    """整个测试会话共用一个 app，数据库为内存 SQLite"""
    return create_app(TestConfig)


@pytest.fixture
def store(app):
    """每个测试一个干净的 WordStore"""
    with app.app_context():
        word_store = WordStore()
        word_store.clear()
        yield word_store
        word_store.clear()
        db.session.remove()


@pytest.fixture
def rng():
    return random.Random(20240611)


def make_words(count, mastery=0, prefix='w'):
    return [WordCard(term=f"{prefix}{i}", translation=f"{prefix}{i}-tr", mastery=mastery)
            for i in range(count)]


class FakeWordStore:
    """内存版 WordStore，只实现训练流程用到的接口"""

    def __init__(self, words=()):
        self.words = {w.term: w for w in words}
        self.updates = []

    def all(self):
        return sorted(self.words.values(), key=lambda w: w.term)

    def update_mastery(self, term, mastery):
        self.updates.append((term, mastery))
        self.words[term] = replace(self.words[term], mastery=mastery)


QUESTION_PREFIXES = (
    'Choose the translation of: ',
    'Choose the word for: ',
    'Translate: ',
    'Write the word for: ',
)


class AnsweringConsole:
    """根据屏幕上最近一道题自动作答

    correct=True 时总是答对；否则选择题答 0，填空题答一个不存在的词。
    """

    def __init__(self, words, correct=True):
        self.by_term = {w.term: w for w in words}
        self.by_translation = {w.translation: w for w in words}
        self.correct = correct
        self.lines = []
        self.questions = []

    def say(self, text):
        self.lines.append(text)

    def ask(self, prompt):
        index = max(i for i, line in enumerate(self.lines) if line.startswith(QUESTION_PREFIXES))
        question = self.lines[index]
        options = self.lines[index + 1:]
        self.questions.append(question)

        if question.startswith('Choose the translation of: '):
            expected = self.by_term[question.split(': ', 1)[1]].translation
        elif question.startswith('Choose the word for: '):
            expected = self.by_translation[question.split(': ', 1)[1]].term
        elif question.startswith('Translate: '):
            return self.by_term[question.split(': ', 1)[1]].translation if self.correct else '???'
        else:
            return self.by_translation[question.split(': ', 1)[1]].term if self.correct else '???'

        if not self.correct:
            return '0'
        for line in options:
            number, value = line.split(': ', 1)
            if value == expected:
                return number
        raise AssertionError(f"correct option missing for {question!r}")


@pytest.fixture
def word_factory():
    return make_words


@pytest.fixture
def fake_store_factory():
    return FakeWordStore


@pytest.fixture
def console_factory():
    return AnsweringConsole


# ========== 注册pytest标记 ==========

def pytest_configure(config):
    config.addinivalue_line("markers", "unit: 标记为单元测试")
    config.addinivalue_line("markers", "integration: 标记为集成测试")
    config.addinivalue_line("markers", "e2e: 标记为端到端测试")
