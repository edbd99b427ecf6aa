"""flashdeck: adaptive word/translation flashcards."""
