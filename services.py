# services.py
"""训练核心：组卷 + 练习状态机

一次训练固定 10 个单词：8 个未掌握的词 + 2 个已掌握的词，保证已掌握的词也会定期复习。
每个词按熟悉程度选择题型，答对 +1，答错 -1，范围限制在 0..4。
"""
import logging
import random
from dataclasses import dataclass, field

import click

from models import MIN_MASTERY, MAX_MASTERY

logger = logging.getLogger(__name__)

SESSION_SIZE = 10
LEARNING_QUOTA = 8
MASTERED_QUOTA = 2
CHOICE_DISTRACTORS = 3

MULTIPLE_CHOICE = 'multiple_choice'
FREE_TEXT = 'free_text'

# 题目方向：给出单词选/写翻译，或者给出翻译选/写单词
TERM_TO_TRANSLATION = 'term_to_translation'
TRANSLATION_TO_TERM = 'translation_to_term'

# 熟悉程度 -> (题型, 方向)。4 和 3 相同，已掌握的词不会变得更难
EXERCISES = {
    0: (MULTIPLE_CHOICE, TERM_TO_TRANSLATION),
    1: (MULTIPLE_CHOICE, TRANSLATION_TO_TERM),
    2: (FREE_TEXT, TERM_TO_TRANSLATION),
    3: (FREE_TEXT, TRANSLATION_TO_TERM),
    4: (FREE_TEXT, TRANSLATION_TO_TERM),
}

# 整个进程共用一个随机源
_rng = random.Random()


class InsufficientWordsError(Exception):
    """词库不足一次训练所需的单词数"""

    def __init__(self, count, required=SESSION_SIZE):
        self.count = count
        self.required = required
        super().__init__(f"need at least {required} words, have {count}")


@dataclass
class SessionResult:
    score: int
    max_score: int
    answers: list = field(default_factory=list)

    def __str__(self):
        return f"{self.score}/{self.max_score}"


# ==================== 组卷 ====================

def compose_session(words, rng=None):
    """从全部单词中挑出一次训练的 10 个词

    未掌握的词最多 8 个、已掌握的词最多 2 个；两边不够时从全部单词里随机补齐。
    补齐时可能和前面选过的词重复，这里不去重。
    """
    rng = rng or _rng
    words = list(words)
    if len(words) < SESSION_SIZE:
        raise InsufficientWordsError(len(words))

    learning = [w for w in words if MIN_MASTERY <= w.mastery < MAX_MASTERY]
    mastered = [w for w in words if w.is_mastered]
    rng.shuffle(learning)
    rng.shuffle(mastered)

    selected = learning[:LEARNING_QUOTA] + mastered[:MASTERED_QUOTA]

    if len(selected) < SESSION_SIZE:
        padding = list(words)
        rng.shuffle(padding)
        logger.debug("padding session: %d learning, %d mastered available",
                     len(learning), len(mastered))
        selected.extend(padding[:SESSION_SIZE - len(selected)])

    return selected[:SESSION_SIZE]


# ==================== 题型与评分 ====================

def pick_exercise(mastery):
    try:
        return EXERCISES[mastery]
    except KeyError:
        raise ValueError(f"mastery out of range: {mastery}")


def next_mastery(mastery, correct):
    if correct:
        return min(mastery + 1, MAX_MASTERY)
    return max(mastery - 1, MIN_MASTERY)


def expected_answer(word, direction):
    if direction == TERM_TO_TRANSLATION:
        return word.translation
    return word.term


def build_choices(word, others, direction, rng=None):
    """生成选择题选项，返回 (选项列表, 正确答案)

    干扰项最多 3 个，从其他单词里随机抽取；词库只有一个词时只剩正确答案。
    """
    rng = rng or _rng
    pool = [w for w in others if w.term != word.term]
    rng.shuffle(pool)

    correct = expected_answer(word, direction)
    options = [expected_answer(w, direction) for w in pool[:CHOICE_DISTRACTORS]]
    options.append(correct)
    rng.shuffle(options)
    return options, correct


def grade_choice(options, correct, answer):
    """选择题评分，非数字或越界的输入都算答错"""
    answer = answer.strip()
    # int() 也接受全角等非 ASCII 数字，这里只认 0-9
    if not (answer.isascii() and answer.isdigit()):
        return False
    choice = int(answer)
    return 1 <= choice <= len(options) and options[choice - 1] == correct


def grade_written(expected, answer):
    # 只去掉首尾空白，大小写敏感，不给部分分
    return answer.strip() == expected


def tally_score(answers):
    """answers 为 (单词, 是否答对) 列表"""
    return SessionResult(
        score=sum(1 for _, correct in answers if correct),
        max_score=SESSION_SIZE,
        answers=list(answers),
    )


def _prompt_answer(text):
    return click.prompt(text, default='', show_default=False, prompt_suffix=' ')


# ==================== 训练流程 ====================

class Trainer:
    """把组卷、出题、评分、写回串起来

    store 需要提供 all() 和 update_mastery(term, mastery)；
    ask/say 默认走终端，测试时可以替换。
    """

    def __init__(self, store, ask=None, say=None, rng=None):
        self.store = store
        self.ask = ask or _prompt_answer
        self.say = say or click.echo
        self.rng = rng or _rng

    def multiple_choice(self, word, direction):
        others = self.store.all()
        options, correct = build_choices(word, others, direction, self.rng)

        if direction == TERM_TO_TRANSLATION:
            self.say(f"Choose the translation of: {word.term}")
        else:
            self.say(f"Choose the word for: {word.translation}")
        for i, option in enumerate(options, start=1):
            self.say(f"{i}: {option}")

        return grade_choice(options, correct, self.ask('Your answer:'))

    def written_answer(self, word, direction):
        if direction == TERM_TO_TRANSLATION:
            self.say(f"Translate: {word.term}")
        else:
            self.say(f"Write the word for: {word.translation}")

        return grade_written(expected_answer(word, direction), self.ask('Your answer:'))

    def exercise(self, word):
        """做一道题并写回新的熟悉程度，返回是否答对

        数据库里熟悉程度越界的词不出题，直接按答错处理，并把熟悉程度拉回 0..4。
        """
        current = word.mastery
        try:
            modality, direction = pick_exercise(current)
        except ValueError:
            logger.warning("mastery of %r out of range: %r", word.term, current)
            current = min(max(current, MIN_MASTERY), MAX_MASTERY)
            modality, correct = None, False
        else:
            if modality == MULTIPLE_CHOICE:
                correct = self.multiple_choice(word, direction)
            else:
                correct = self.written_answer(word, direction)

        if correct:
            self.say("Correct!\n")
        else:
            self.say("Wrong!")
            self.say(f"'{word.term}' means '{word.translation}'\n")

        mastery = next_mastery(current, correct)
        self.store.update_mastery(word.term, mastery)
        logger.debug("%s: %r %s, mastery %d -> %d", modality, word.term,
                     'correct' if correct else 'wrong', word.mastery, mastery)
        return correct

    def run_session(self):
        """完整跑一次训练，词数不够时提示并返回 None"""
        words = self.store.all()
        try:
            selected = compose_session(words, self.rng)
        except InsufficientWordsError as e:
            self.say(f"You need at least {e.required} words in the dictionary "
                     f"to train (you have {e.count}).")
            return None

        answers = [(word.term, self.exercise(word)) for word in selected]
        result = tally_score(answers)
        self.say(f"TOTAL SCORE: {result}")
        return result
