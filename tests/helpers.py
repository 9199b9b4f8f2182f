from modoflex.models import Point, SessionState

OFF_BOARD = Point(x=-500, y=-500)


def token_for(state: SessionState, char: str):
    return next(t for t in state.tokens if t.char == char and not t.fading_out)


def point_of(state: SessionState, char: str) -> Point:
    token = token_for(state, char)
    return Point(x=token.position.x, y=token.position.y)


def type_word(state: SessionState, word: str, tap):
    for char in word:
        state = tap(state, point_of(state, char))
    return state
