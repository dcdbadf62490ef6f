# baby_face_predictor/services/prompting/baby_portrait.py

PROMPT_BABY_PORTRAIT = (
    "{{COMPOSITION}}, {{COLOR_EMPHASIS}}, "
    "professional portrait of {{AGE_DESCRIPTION}} {{GENDER_DESCRIPTION}}, "
    "{{SKIN_TONE}}, {{EYE_COLOR}} eyes, {{HAIR_COLOR}} hair, {{FACE_SHAPE}} face shape, "
    "{{RESEMBLANCE}}, "
    "natural baby skin texture, realistic human infant, studio portrait lighting, "
    "soft focus background, beautiful natural lighting, high quality photography"
)

COMPOSITION = "closeup portrait, headshot, professional baby photography"
# Keeps generators away from black and white or sepia output
COLOR_EMPHASIS = "full color photograph, vibrant natural colors"

DEFAULT_AGE_BUCKET = 2
AGE_DESCRIPTIONS: dict[int, str] = {
    1: "newborn infant, 12 months old, very chubby cheeks, minimal hair, large eyes, very soft facial features",
    2: "toddler, 24 months old, round face, developing facial structure, soft baby features, curious expression",
    3: "young child, 36 months old, more defined features, playful expression, developing personality in eyes",
    4: "preschooler, 4 years old, clearer facial definition, bright intelligent eyes, beginning to lose baby fat",
    5: "kindergarten age child, 5 years old, more mature facial structure, confident expression, defined features",
}

DEFAULT_GENDER = "random"
GENDER_DESCRIPTIONS: dict[str, str] = {
    "male": "baby boy, masculine infant features, strong jawline (age appropriate), broader face structure",
    "female": "baby girl, feminine infant features, softer jawline, delicate facial structure",
    "random": "gender-neutral baby, balanced facial features, natural expression",
}

# tone -> (weighted phrase, attention weight, trailing description).
# Generators drift toward lighter skin, so weights grow with darkness.
SKIN_TONE_EMPHASIS: dict[str, tuple[str, float, str]] = {
    "very light": ("very light skin tone", 1.0, "porcelain complexion, fair skin"),
    "pale": ("pale skin tone", 1.0, "very light complexion, fair skin"),
    "light": ("light skin tone", 1.0, "fair complexion, pale skin"),
    "fair": ("fair skin tone", 1.0, "light complexion, pale skin"),
    "medium-light": ("medium-light skin tone", 1.0, "warm olive complexion"),
    "medium": ("medium skin tone", 1.0, "natural brown complexion, warm skin"),
    "olive": ("olive skin tone", 1.0, "medium Mediterranean complexion, warm undertones"),
    "tan": ("tan skin tone", 1.0, "sun-kissed bronze complexion, medium brown skin"),
    "brown": ("brown skin tone", 1.3, "rich brown complexion, medium-dark skin"),
    "dark brown": ("dark brown skin tone", 1.4, "deep brown complexion, rich dark skin"),
    "dark": ("dark skin tone", 1.4, "deep brown complexion, rich dark skin, dark brown skin"),
    "deep": ("deep skin tone", 1.4, "deep brown complexion, rich dark skin"),
    "black": ("very dark skin tone", 1.5, "deep ebony complexion, rich dark brown skin"),
    "ebony": ("ebony skin tone", 1.5, "very dark complexion, deep rich brown skin"),
}


def emphasize_skin_tone(skin_tone: str) -> str:
    entry = SKIN_TONE_EMPHASIS.get(skin_tone)
    if entry is None:
        return f"{skin_tone} skin tone, natural complexion"
    phrase, weight, description = entry
    if weight > 1.0:
        return f"({phrase}:{weight}), {description}"
    return f"{phrase}, {description}"


def describe_age(age: int) -> str:
    return AGE_DESCRIPTIONS.get(age, AGE_DESCRIPTIONS[DEFAULT_AGE_BUCKET])


def describe_gender(gender: str) -> str:
    return GENDER_DESCRIPTIONS.get(gender, GENDER_DESCRIPTIONS[DEFAULT_GENDER])
