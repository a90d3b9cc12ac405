from enum import Enum

class QuestionType(str, Enum):
    CATEGORIZE = "categorize"        # Drag items into categories
    CLOZE = "cloze"                  # Fill in the blanks
    COMPREHENSION = "comprehension"  # Passage + multiple-choice sub-questions

class ErrorCode(str, Enum):
    INVALID_REQUEST = "INVALID_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    FORM_NOT_FOUND = "FORM_NOT_FOUND"
    RESPONSE_NOT_FOUND = "RESPONSE_NOT_FOUND"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
