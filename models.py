# models.py
from dataclasses import dataclass

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

# 熟悉程度: 0=新词 ... 4=已掌握
MIN_MASTERY = 0
MAX_MASTERY = 4


class Word(db.Model):
    __tablename__ = 'words'
    term = db.Column(db.String, primary_key=True)
    translation = db.Column(db.String, nullable=False)
    mastery = db.Column(db.Integer, nullable=False, default=MIN_MASTERY)

    def to_card(self):
        return WordCard(term=self.term, translation=self.translation, mastery=self.mastery)


@dataclass(frozen=True)
class WordCard:
    """脱离数据库会话的单词快照，训练逻辑只读取它，修改通过 WordStore 写回"""
    term: str
    translation: str
    mastery: int = MIN_MASTERY

    @property
    def is_mastered(self):
        return self.mastery == MAX_MASTERY
