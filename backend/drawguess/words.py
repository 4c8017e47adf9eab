import random

WORDS = [
    "apple", "banana", "cat", "dog", "computer", "spaceship", "pizza", "soccer", "piano", "snowman",
    "airplane", "car", "ice cream", "fried chicken", "rainbow", "school", "teacher", "doctor", "police", "bicycle",
    "camera", "phone", "clock", "glasses", "library", "sea", "mountain", "tree", "flower", "sun", "moon", "star",
    "elephant", "giraffe", "tiger", "lion", "penguin", "panda", "rabbit", "squirrel", "turtle", "fish", "butterfly",
    "bee", "ant", "spider", "wallet", "umbrella", "hat", "bag", "shoes", "clothes", "bed", "desk", "chair",
]


def pick_word(rng=random):
    """Uniform random pick from the word list."""
    return rng.choice(WORDS)
