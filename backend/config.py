import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
    ).split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Round timing (milliseconds)
    ROUND_DURATION_MS = int(os.environ.get('ROUND_DURATION_MS', '60000'))
    TIMER_TICK_MS = int(os.environ.get('TIMER_TICK_MS', '1000'))
    # Grace periods so clients can render transitions
    GAME_START_DELAY_MS = int(os.environ.get('GAME_START_DELAY_MS', '1500'))
    NEXT_ROUND_DELAY_MS = int(os.environ.get('NEXT_ROUND_DELAY_MS', '2500'))
    # Scoring
    CORRECT_GUESS_POINTS = int(os.environ.get('CORRECT_GUESS_POINTS', '20'))
    TIMEOUT_PENALTY = int(os.environ.get('TIMEOUT_PENALTY', '10'))
    CHEATING_PENALTY = int(os.environ.get('CHEATING_PENALTY', '10'))
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    USERNAME_MAX_LENGTH = int(os.environ.get('USERNAME_MAX_LENGTH', '20'))
    # Anti-cheat classifier
    CHEAT_CHECK_INTERVAL_MS = int(os.environ.get('CHEAT_CHECK_INTERVAL_MS', '3000'))
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
    CLASSIFIER_MODEL = os.environ.get('CLASSIFIER_MODEL', 'gpt-4o-mini')
    CLASSIFIER_TIMEOUT_SEC = float(os.environ.get('CLASSIFIER_TIMEOUT_SEC', '10'))
