"""Seed content: reading materials, board questions and story episodes."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Material:
    title: str
    content: str
    category: str
    difficulty: int
    # (question_text, correct_answer, hint, comma-separated distractors)
    questions: tuple[tuple[str, str, str, str], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Episode:
    number: int
    title: str
    content: str
    xp_reward: int
    # (question_text, correct_answer, option_a, option_b, option_c, option_d)
    quizzes: tuple[tuple[str, str, str, str, str, str], ...] = field(default_factory=tuple)


MATERIALS: tuple[Material, ...] = (
    Material(
        title="The Jungle Adventure",
        content=(
            "Leo ventured deep into the Jumanji jungle. He encountered monkeys, crossed "
            "rivers, and discovered ancient ruins. The monkeys were playful but "
            "mischievous, stealing his map. The river was home to crocodiles, so he had "
            "to build a raft. In the ruins, he found a golden statue that granted him "
            "one wish."
        ),
        category="Jumanji",
        difficulty=1,
        questions=(
            ("What did the monkeys steal from Leo?", "map", "The monkeys were mischievous and took his map.", "food,hat,compass"),
            ("How did Leo cross the crocodile river?", "raft", "He built a raft to safely cross.", "boat,swimming,bridge"),
            ("What did Leo find in the ruins?", "golden statue", "The ancient ruins held a golden statue.", "treasure chest,magic book,diamond"),
            ("What could the golden statue grant?", "one wish", "The statue granted a single wish.", "three wishes,immortality,wealth"),
            ("Who was playful but mischievous?", "monkeys", "The monkeys caused trouble playfully.", "crocodiles,birds,tigers"),
            ("Where did Leo venture?", "Jumanji jungle", "His adventure began in the jungle.", "desert,mountain,ocean"),
            ("What animals lived in the river?", "crocodiles", "Dangerous crocodiles lived there.", "hippos,snakes,fish"),
            ("What was stolen from Leo?", "map", "Without it, he was lost.", "food,water,backpack"),
            ("How did Leo feel in the jungle?", "adventurous", "He was excited to explore.", "scared,bored,tired"),
            ("What color was the statue?", "golden", "It shined with gold.", "silver,bronze,copper"),
        ),
    ),
    Material(
        title="Word Magic",
        content=(
            "In the land of Scrabble, letters float in the air. Sara learned that "
            "arranging them correctly creates magic spells. She spelled 'WINGS' and "
            "could fly, 'FIRE' to warm the cold cave, and 'LIGHT' to illuminate dark "
            "paths. Each word had power, but misspelling could cause chaos."
        ),
        category="Scrabble",
        difficulty=2,
        questions=(
            ("Unscramble: IGNSW", "WINGS", "These let you fly.", "SINGW,WIGNS,SWING"),
            ("Unscramble: IREF", "FIRE", "It produces heat.", "RIEF,RIFE,FIER"),
            ("Unscramble: GHLIT", "LIGHT", "Makes things visible.", "THIGL,LIGTH,GILHT"),
            ("Unscramble: OOLCSH", "SCHOOL", "Where you learn.", "COOLSH,SCHOOL,LOOCHS"),
            ("Unscramble: NDAERG", "GARDEN", "Where flowers grow.", "RANDEG,DANGER,GRANDE"),
            ("Unscramble: OKBO", "BOOK", "Full of stories.", "KOOB,BOKO,OOBK"),
            ("Unscramble: PICRENE", "PRINCE", "A royal title.", "NEPRICE,PINCERE,CRIPENE"),
            ("Unscramble: EULB", "BLUE", "Color of the sky.", "LUBE,UBLE,ELUB"),
            ("Unscramble: OMUSE", "MOUSE", "Computer peripheral.", "SOUME,EMOUS,UOSEM"),
            ("Unscramble: LAPPE", "APPLE", "A fruit.", "PAPEL,PEAPL,LEAPP"),
        ),
    ),
    Material(
        title="The Great Race",
        content=(
            "On the Snakes and Ladders board, players race to reach the finish. The "
            "ladders represent good deeds - helping others lets you climb higher. The "
            "snakes are mistakes - cheating or lying sends you sliding back. Tim "
            "learned that honesty and kindness were the real keys to winning."
        ),
        category="Snakes",
        difficulty=3,
        questions=(
            ("If you have 5 apples and eat 2, how many left?", "3", "Simple subtraction.", "2,4,7"),
            ("What is 7 + 8?", "15", "Addition problem.", "14,16,17"),
            ("Which word is a noun: RUN, HOUSE, FAST", "HOUSE", "A person, place, or thing.", "RUN,FAST,ALL"),
            ("What is the opposite of HOT?", "cold", "Temperature antonyms.", "warm,cool,freezing"),
            ("How many sides does a square have?", "4", "Basic geometry.", "3,5,6"),
            ("What comes after 19?", "20", "Counting numbers.", "18,21,19"),
            ("Which is a color: DOG, RED, CAR", "RED", "Color identification.", "DOG,CAR,BLUE"),
            ("What is 12 - 5?", "7", "Subtraction.", "6,8,9"),
            ("Which word means big: SMALL, LARGE, TINY", "LARGE", "Synonyms.", "SMALL,TINY,HUGE"),
            ("How many legs does a dog have?", "4", "Animal anatomy.", "2,3,5"),
        ),
    ),
)


EPISODES: tuple[Episode, ...] = (
    Episode(
        number=1,
        title="The Mysterious Forest",
        content=(
            "In the heart of the Enchanted Forest, young Mia discovered a glowing map. "
            "The map showed a path to the legendary Crystal of Knowledge. As she "
            "ventured deeper, she met talking animals who warned her of tricky puzzles "
            "ahead. The first challenge was to cross the Bridge of Questions, where "
            "each step required a correct answer."
        ),
        xp_reward=30,
        quizzes=(
            ("What did Mia discover in the forest?", "A glowing map", "A magic wand", "A talking tree", "A hidden cave", "A glowing map"),
            ("What was Mia looking for?", "The Crystal of Knowledge", "Gold coins", "Magic powers", "A secret treasure", "The Crystal of Knowledge"),
            ("Who warned Mia about puzzles?", "Talking animals", "Wise owl", "Fairy godmother", "Forest spirits", "Talking animals"),
            ("What did she need to cross?", "Bridge of Questions", "River of Riddles", "Mountain of Mysteries", "Cave of Confusion", "Bridge of Questions"),
        ),
    ),
    Episode(
        number=2,
        title="The Wise Owl's Challenge",
        content=(
            "After crossing the bridge, Mia met Professor Hoot, a wise old owl. He "
            "explained that the Crystal of Knowledge was protected by three guardians. "
            "Each guardian would ask questions about reading comprehension. 'To pass,' "
            "said Professor Hoot, 'you must understand not just words, but their "
            "meanings.' He gave Mia a magical book that would help her on her journey."
        ),
        xp_reward=40,
        quizzes=(
            ("Who did Mia meet after the bridge?", "Professor Hoot the owl", "A friendly fox", "A magical deer", "A wise turtle", "Professor Hoot the owl"),
            ("How many guardians protected the crystal?", "Three", "One", "Five", "Seven", "Three"),
            ("What would the guardians ask about?", "Reading comprehension", "Math problems", "History facts", "Science questions", "Reading comprehension"),
            ("What did Professor Hoot give Mia?", "A magical book", "A compass", "A map", "A lantern", "A magical book"),
        ),
    ),
    Episode(
        number=3,
        title="The First Guardian",
        content=(
            "The first guardian was a majestic unicorn named Starlight. She guarded "
            "the Gateway of Vocabulary. 'To proceed,' she said, 'you must show me you "
            "understand the power of words.' She presented Mia with a series of "
            "passages and asked her to find the main ideas and important details. Mia "
            "opened her magical book and began to read carefully."
        ),
        xp_reward=50,
        quizzes=(
            ("Who was the first guardian?", "Starlight the unicorn", "A mighty dragon", "A stone giant", "A water spirit", "Starlight the unicorn"),
            ("What did the first guardian guard?", "Gateway of Vocabulary", "Door of Words", "Portal of Letters", "Gate of Grammar", "Gateway of Vocabulary"),
            ("What did Mia need to find in the passages?", "Main ideas and details", "Hidden messages", "Secret codes", "Magic words", "Main ideas and details"),
            ("What helped Mia read carefully?", "Her magical book", "A reading spell", "Special glasses", "A thinking cap", "Her magical book"),
        ),
    ),
    Episode(
        number=4,
        title="The Second Guardian",
        content=(
            "Next, Mia encountered Blaze, a friendly dragon who guarded the Bridge of "
            "Comprehension. 'I won't breathe fire,' Blaze chuckled, 'but I will test "
            "how well you understand stories!' He gave Mia short tales to read and "
            "asked questions about characters, settings, and plots. With each correct "
            "answer, the bridge grew stronger."
        ),
        xp_reward=60,
        quizzes=(
            ("Who was the second guardian?", "Blaze the dragon", "A phoenix", "A griffin", "A pegasus", "Blaze the dragon"),
            ("What did the second guardian guard?", "Bridge of Comprehension", "Path of Understanding", "Road of Knowledge", "Way of Wisdom", "Bridge of Comprehension"),
            ("What did Blaze ask about?", "Characters, settings, and plots", "Grammar rules", "Spelling words", "Writing styles", "Characters, settings, and plots"),
            ("What happened with each correct answer?", "The bridge grew stronger", "Fireworks appeared", "The path lit up", "Stars fell from the sky", "The bridge grew stronger"),
        ),
    ),
    Episode(
        number=5,
        title="The Final Guardian",
        content=(
            "The last guardian was Aurora, a beautiful phoenix who protected the "
            "Crystal Chamber. 'One final test,' she sang. 'You must show you can make "
            "predictions and understand the deeper meaning of stories.' Aurora shared "
            "ancient tales and asked Mia what might happen next and why characters "
            "made certain choices. Mia's thoughtful answers impressed the phoenix."
        ),
        xp_reward=70,
        quizzes=(
            ("Who was the final guardian?", "Aurora the phoenix", "A sphinx", "A mermaid", "A fairy queen", "Aurora the phoenix"),
            ("What did the final test involve?", "Making predictions and understanding deeper meaning", "Writing stories", "Memorizing facts", "Solving riddles", "Making predictions and understanding deeper meaning"),
            ("What did Aurora share with Mia?", "Ancient tales", "Magic spells", "Secret maps", "Hidden treasures", "Ancient tales"),
            ("What impressed the phoenix?", "Mia's thoughtful answers", "Mia's speed", "Mia's bravery", "Mia's kindness", "Mia's thoughtful answers"),
        ),
    ),
    Episode(
        number=6,
        title="The Crystal of Knowledge",
        content=(
            "The Crystal Chamber sparkled with light. There, floating in the center, "
            "was the Crystal of Knowledge. 'You have proven yourself worthy,' the "
            "guardians said together. 'The crystal will grant you the power of enhanced "
            "reading and understanding.' As Mia touched the crystal, she felt all the "
            "stories she had read come alive in her mind. She could now understand any "
            "book she picked up!"
        ),
        xp_reward=100,
        quizzes=(
            ("What was in the Crystal Chamber?", "The Crystal of Knowledge", "A magic wand", "A treasure chest", "A golden crown", "The Crystal of Knowledge"),
            ("What power did the crystal grant?", "Enhanced reading and understanding", "Super strength", "Flying ability", "Invisibility", "Enhanced reading and understanding"),
            ("How did Mia feel when touching the crystal?", "Stories came alive in her mind", "Tired and sleepy", "Scared and nervous", "Confused and lost", "Stories came alive in her mind"),
            ("What could Mia now understand?", "Any book she picked up", "Only fairy tales", "Just adventure stories", "Picture books only", "Any book she picked up"),
        ),
    ),
)

FINAL_EPISODE = EPISODES[-1].number
