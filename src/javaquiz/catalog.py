import glob
import logging
import os
from typing import Any, Dict, List, Tuple

import pandas as pd
from pydantic import ValidationError

from .models import Level, Question

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["id", "level", "topic", "text", "options", "correct_answer"]
OPTION_SEPARATOR = "|"

BUILTIN_QUESTIONS: List[Dict[str, Any]] = [
    {
        "id": "b-syn-1",
        "level": "Beginner",
        "topic": "Syntax",
        "text": "Which keyword declares a constant in Java?",
        "options": ["const", "final", "static", "let"],
        "correct_answer": "final",
        "explanation": "A final variable can be assigned only once.",
    },
    {
        "id": "b-syn-2",
        "level": "Beginner",
        "topic": "Syntax",
        "text": "What is the entry point method of a Java application?",
        "options": ["start()", "run()", "main()", "init()"],
        "correct_answer": "main()",
        "explanation": "The JVM starts execution at public static void main(String[] args).",
    },
    {
        "id": "b-syn-3",
        "level": "Beginner",
        "topic": "Syntax",
        "text": "Which type holds a single 16-bit Unicode character?",
        "options": ["char", "byte", "String", "short"],
        "correct_answer": "char",
        "explanation": "char is an unsigned 16-bit UTF-16 code unit.",
    },
    {
        "id": "b-syn-4",
        "level": "Beginner",
        "topic": "Syntax",
        "text": "How do you write a single-line comment?",
        "options": ["# comment", "// comment", "-- comment", "<!-- comment -->"],
        "correct_answer": "// comment",
        "explanation": "",
    },
    {
        "id": "b-syn-5",
        "level": "Beginner",
        "topic": "Syntax",
        "text": "What does 7 / 2 evaluate to when both operands are int?",
        "options": ["3.5", "3", "4", "3.0"],
        "correct_answer": "3",
        "explanation": "Integer division truncates toward zero.",
    },
    {
        "id": "b-oop-1",
        "level": "Beginner",
        "topic": "OOP",
        "text": "Which keyword creates a subclass?",
        "options": ["implements", "extends", "inherits", "super"],
        "correct_answer": "extends",
        "explanation": "Classes extend classes and implement interfaces.",
    },
    {
        "id": "b-oop-2",
        "level": "Beginner",
        "topic": "OOP",
        "text": "What is the default superclass of every class?",
        "options": ["Object", "Class", "Base", "None"],
        "correct_answer": "Object",
        "explanation": "java.lang.Object is the root of the class hierarchy.",
    },
    {
        "id": "i-oop-1",
        "level": "Intermediate",
        "topic": "OOP",
        "text": "Can an interface declare a method with a body?",
        "options": ["No, never", "Yes, as a default method", "Only if abstract", "Only in Java 5"],
        "correct_answer": "Yes, as a default method",
        "explanation": "Since Java 8 interfaces can declare default and static methods.",
    },
    {
        "id": "i-col-1",
        "level": "Intermediate",
        "topic": "Collections",
        "text": "Which collection rejects duplicate elements?",
        "options": ["ArrayList", "LinkedList", "HashSet", "ArrayDeque"],
        "correct_answer": "HashSet",
        "explanation": "Set implementations keep at most one of each equal element.",
    },
    {
        "id": "i-col-2",
        "level": "Intermediate",
        "topic": "Collections",
        "text": "Which map keeps its keys sorted?",
        "options": ["HashMap", "TreeMap", "LinkedHashMap", "IdentityHashMap"],
        "correct_answer": "TreeMap",
        "explanation": "TreeMap is a red-black tree ordered by key.",
    },
    {
        "id": "i-col-3",
        "level": "Intermediate",
        "topic": "Collections",
        "text": "What does List.of(1, 2).add(3) do?",
        "options": ["Returns true", "Throws UnsupportedOperationException", "Returns false", "Does nothing"],
        "correct_answer": "Throws UnsupportedOperationException",
        "explanation": "List.of returns an unmodifiable list.",
    },
    {
        "id": "a-con-1",
        "level": "Advanced",
        "topic": "Concurrency",
        "text": "Which keyword guarantees visibility of writes across threads without locking?",
        "options": ["transient", "volatile", "synchronized", "atomic"],
        "correct_answer": "volatile",
        "explanation": "A volatile write happens-before every subsequent read of that field.",
    },
    {
        "id": "a-con-2",
        "level": "Advanced",
        "topic": "Concurrency",
        "text": "Which class runs tasks on a pool of worker threads?",
        "options": ["Thread", "ExecutorService", "Runnable", "Future"],
        "correct_answer": "ExecutorService",
        "explanation": "",
    },
    {
        "id": "a-con-3",
        "level": "Advanced",
        "topic": "Concurrency",
        "text": "What does ConcurrentHashMap.putIfAbsent guarantee?",
        "options": ["Atomic check-then-insert", "Sorted insertion", "Blocking until absent", "Nothing"],
        "correct_answer": "Atomic check-then-insert",
        "explanation": "The lookup and insert happen as one atomic operation.",
    },
]


# --- Service Layer: Question Catalog ---
class QuestionCatalog:
    """Loads the question bank and answers (level, topic) queries.

    The catalog is replaced wholesale by ``load_all``; questions are never
    mutated in place.
    """

    def __init__(self, directory: str):
        self.directory = directory
        self.questions: List[Question] = []

    def load_all(self) -> List[Question]:
        questions: List[Question] = []
        if not os.path.isdir(self.directory):
            logger.warning(f"Question directory {self.directory} not found.")
        else:
            csv_files = sorted(glob.glob(os.path.join(self.directory, "*.csv")))
            for file_path in csv_files:
                questions.extend(self._load_file(file_path))

        if not questions:
            logger.warning("No questions loaded from CSV. Using built-in bank.")
            questions = [Question(**item) for item in BUILTIN_QUESTIONS]

        self.questions = questions
        return list(self.questions)

    def _load_file(self, file_path: str) -> List[Question]:
        file_name = os.path.basename(file_path)
        try:
            df = pd.read_csv(file_path, encoding="utf-8", dtype=str).fillna("")
        except Exception as e:
            logger.error(f"Failed to load {file_path}: {e}")
            return []

        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            logger.error(f"Skipping {file_name}: Missing columns {missing}.")
            return []

        loaded = []
        for row in df.to_dict("records"):
            options = [o.strip() for o in row["options"].split(OPTION_SEPARATOR)]
            options = [o for o in options if o]
            try:
                loaded.append(
                    Question(
                        id=row["id"],
                        level=row["level"],
                        topic=row["topic"],
                        text=row["text"],
                        options=options,
                        correct_answer=row["correct_answer"],
                        explanation=row.get("explanation", ""),
                    )
                )
            except ValidationError:
                logger.warning(f"Skipping invalid row {row['id']!r} in {file_name}.")
        logger.info(f"Loaded {len(loaded)} questions from {file_name}")
        return loaded

    def query(self, level: Level, topic: str) -> List[Question]:
        return [q for q in self.questions if q.level == level and q.topic == topic]

    def get_topics(self) -> List[Dict[str, Any]]:
        counts: Dict[Tuple[Level, str], int] = {}
        for q in self.questions:
            key = (q.level, q.topic)
            counts[key] = counts.get(key, 0) + 1

        level_order = list(Level)
        topics = [
            {
                "id": f"{level.value}-{topic}",
                "level": level.value,
                "topic": topic,
                "count": count,
            }
            for (level, topic), count in counts.items()
        ]
        topics.sort(key=lambda x: (level_order.index(Level(x["level"])), x["topic"]))
        return topics
