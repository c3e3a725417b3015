# store.py
import logging
from dataclasses import dataclass

import chardet
from sqlalchemy.exc import SQLAlchemyError

from models import db, Word, MIN_MASTERY, MAX_MASTERY

logger = logging.getLogger(__name__)


class ImportFormatError(ValueError):
    """导入的文件无法作为文本单词表解析"""


@dataclass
class ImportReport:
    added: int = 0
    duplicates: int = 0
    missing_translation: int = 0


class WordStore:
    """单词表的持久化层，所有方法都需要在 app context 中调用

    数据库错误不在这里处理，回滚之后直接抛给调用方。
    """

    def __init__(self, session=None):
        self.session = session or db.session

    def _commit(self):
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def ensure_schema(self):
        db.create_all()

    def add(self, term, translation):
        """新增单词，已存在则忽略（不更新翻译），返回是否真的插入了"""
        term = term.strip()
        translation = translation.strip()
        if not term:
            raise ValueError('Term cannot be empty.')
        if not translation:
            raise ValueError('Translation cannot be empty.')

        if self.session.get(Word, term) is not None:
            logger.debug("skip duplicate term %r", term)
            return False

        self.session.add(Word(term=term, translation=translation, mastery=MIN_MASTERY))
        self._commit()
        logger.debug("added %r -> %r", term, translation)
        return True

    def remove(self, term):
        term = term.strip()
        deleted = self.session.query(Word).filter_by(term=term).delete()
        self._commit()
        logger.debug("removed %r (%d rows)", term, deleted)
        return deleted > 0

    def clear(self):
        deleted = self.session.query(Word).delete()
        self._commit()
        logger.debug("cleared %d words", deleted)
        return deleted

    def all(self):
        words = self.session.query(Word).order_by(Word.term).all()
        return [w.to_card() for w in words]

    def update_mastery(self, term, mastery):
        term = term.strip()
        if not (MIN_MASTERY <= mastery <= MAX_MASTERY):
            raise ValueError(f'Mastery must be {MIN_MASTERY}..{MAX_MASTERY}.')
        self.session.query(Word).filter_by(term=term).update({'mastery': mastery})
        self._commit()
        logger.debug("mastery of %r set to %d", term, mastery)

    def import_text(self, raw_data):
        """从文本单词表批量导入，每行格式为 `单词 翻译`

        翻译部分可以包含空格；没有翻译的行会被跳过。
        """
        report = ImportReport()
        if not raw_data:
            return report

        content = decode_word_list(raw_data)

        for line in content.splitlines():
            parts = line.strip().split(maxsplit=1)
            if not parts:
                continue
            if len(parts) < 2:
                report.missing_translation += 1
                continue

            term, translation = parts
            if self.add(term, translation):
                report.added += 1
            else:
                report.duplicates += 1

        logger.debug("import finished: %s", report)
        return report


def decode_word_list(raw_data):
    """解码上传的单词表：优先按 utf-8，失败再用 chardet 检测到的编码

    chardet 的置信度在不同版本之间差别很大，这里不按置信度取舍，只看能否解码。
    """
    # 含有零字节基本可以确定是二进制文件
    if b'\x00' in raw_data:
        raise ImportFormatError('File looks like binary data, not a word list.')

    try:
        return raw_data.decode('utf-8')
    except UnicodeDecodeError:
        pass

    encoding = chardet.detect(raw_data)['encoding']
    if not encoding:
        raise ImportFormatError('Unable to detect the file encoding.')
    try:
        return raw_data.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        raise ImportFormatError(f'Unable to decode the file as {encoding}.')
