"""Predefined option values for tone / relationship / purpose filters"""

PREDEFINED_TONES = ("formal", "polite", "casual", "friendly")

PREDEFINED_RELATIONSHIPS = (
    "professor",
    "supervisor",
    "colleague",
    "client",
    "friend",
)

PREDEFINED_PURPOSES = ("request", "apology", "thank", "inquiry", "report")

# Filter value meaning "anything outside the predefined list"
OTHER_OPTION = "__other__"
