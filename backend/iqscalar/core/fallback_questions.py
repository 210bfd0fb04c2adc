"""
Built-in question banks used when the configured bank cannot be loaded.
"""
from typing import Tuple

from iqscalar.models import Question

FALLBACK_TEST_QUESTIONS: Tuple[Question, ...] = (
    Question(
        id="fallback_1",
        category="numerical_reasoning",
        prompt="What is the missing number in the sequence: 2, 4, 6, 8, ?",
        options=("9", "10", "12", "14"),
        correct_index=1,
        explanation="Each term adds 2 to the previous one.",
    ),
    Question(
        id="fallback_2",
        category="logical_reasoning",
        prompt=(
            "All Bloops are Razzles and all Razzles are Lazzles. "
            "Are all Bloops definitely Lazzles?"
        ),
        options=("True", "False", "Cannot be determined", "Sometimes true"),
        correct_index=0,
        explanation="Membership carries through both statements (a syllogism).",
    ),
    Question(
        id="fallback_3",
        category="numerical_reasoning",
        prompt="Find the missing number: 5, 10, 15, ?, 25",
        options=("16", "20", "18", "22"),
        correct_index=1,
        explanation="Each term adds 5 to the previous one.",
    ),
    Question(
        id="fallback_4",
        category="logical_reasoning",
        prompt="Which word does not belong: Apple, Orange, Banana, Carrot?",
        options=("Apple", "Orange", "Banana", "Carrot"),
        correct_index=3,
        explanation="Carrot is a vegetable; the others are fruits.",
    ),
    Question(
        id="fallback_5",
        category="numerical_reasoning",
        prompt="What comes next: 3, 6, 9, 12, ?",
        options=("14", "15", "16", "18"),
        correct_index=1,
        explanation="Each term adds 3 to the previous one.",
    ),
    Question(
        id="fallback_6",
        category="logical_reasoning",
        prompt="Book is to Reading as Fork is to ?",
        options=("Eating", "Cooking", "Kitchen", "Food"),
        correct_index=0,
        explanation="A book is used for reading, a fork for eating.",
    ),
    Question(
        id="fallback_7",
        category="numerical_reasoning",
        prompt="Complete the series: 100, 90, 80, 70, ?",
        options=("50", "60", "65", "55"),
        correct_index=1,
        explanation="Each term subtracts 10 from the previous one.",
    ),
    Question(
        id="fallback_8",
        category="logical_reasoning",
        prompt="If RED = 27 and BLUE = 40, what is GREEN (sum of alphabet positions)?",
        options=("49", "59", "52", "58"),
        correct_index=0,
        explanation="G(7) + R(18) + E(5) + E(5) + N(14) = 49.",
    ),
    Question(
        id="fallback_9",
        category="numerical_reasoning",
        prompt="Find the next number: 1, 4, 9, 16, ?",
        options=("20", "25", "24", "30"),
        correct_index=1,
        explanation="The terms are perfect squares: 1, 4, 9, 16, 25.",
    ),
    Question(
        id="fallback_10",
        category="logical_reasoning",
        prompt="Which number is the odd one out: 3, 5, 7, 9, 11?",
        options=("3", "5", "9", "11"),
        correct_index=2,
        explanation="9 is the only value in the list that is not prime.",
    ),
)

FALLBACK_PRACTICE_QUESTIONS: Tuple[Question, ...] = (
    Question(
        id="fallback_practice_1",
        category="Verbal-Logical Reasoning",
        prompt="HAPPY is to SAD as JOY is to _______?",
        options=("Sorrow", "Anger", "Fear", "Love", "Peace"),
        correct_index=0,
        explanation="Happy and sad are opposites, as are joy and sorrow.",
    ),
    Question(
        id="fallback_practice_2",
        category="Numerical & Abstract Reasoning",
        prompt="What number comes next in the sequence: 2, 4, 8, 16, 32, ?",
        options=("48", "56", "64", "72", "80"),
        correct_index=2,
        explanation="Each number doubles the previous one.",
    ),
    Question(
        id="fallback_practice_3",
        category="Spatial Reasoning",
        prompt="In how many different orders can 5 distinct coloured balls be lined up?",
        options=("25", "60", "120", "240", "360"),
        correct_index=2,
        explanation="Permutations of 5 distinct items: 5! = 120.",
    ),
)
