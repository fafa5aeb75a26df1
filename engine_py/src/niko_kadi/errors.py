# engine_py/src/niko_kadi/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class InvalidGameStateError(GameError):
    """Raised when a serialized game state cannot be imported."""
    def __init__(self, message: str):
        super().__init__(INVALID_STATE_DATA, message)


# Preconditions
GAME_NOT_INITIALIZED = "GAME_NOT_INITIALIZED"
GAME_FINISHED = "GAME_FINISHED"
PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
NOT_YOUR_TURN = "NOT_YOUR_TURN"
NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"
TOO_MANY_PLAYERS = "TOO_MANY_PLAYERS"
DUPLICATE_PLAYER = "DUPLICATE_PLAYER"
NO_STARTING_CARD = "NO_STARTING_CARD"

# Illegal moves
MUST_DRAW = "MUST_DRAW"
NO_CARDS = "NO_CARDS"
DUPLICATE_CARDS = "DUPLICATE_CARDS"
OWNERSHIP_MISMATCH = "OWNERSHIP_MISMATCH"
RANK_MISMATCH = "RANK_MISMATCH"
AWAITING_ANSWER = "AWAITING_ANSWER"
PENALTY_ACTIVE = "PENALTY_ACTIVE"
SUIT_RANK_MISMATCH = "SUIT_RANK_MISMATCH"
SUIT_REQUIRED = "SUIT_REQUIRED"
UNEXPECTED_SUIT = "UNEXPECTED_SUIT"
ALREADY_DECLARED = "ALREADY_DECLARED"

# Win condition failures
NO_ACE_OUT = "NO_ACE_OUT"
INVALID_FINISHING_CARD = "INVALID_FINISHING_CARD"
NIKO_NOT_DECLARED = "NIKO_NOT_DECLARED"
NIKO_WRONG_ROUND = "NIKO_WRONG_ROUND"

# Serialization
INVALID_STATE_DATA = "INVALID_STATE_DATA"


# Helper function to raise common errors
def raise_error(code: str, message: str):
    raise GameError(code, message)
