import os
from pathlib import Path

DATA_DIR = Path(__file__).parent / 'data'

class Config:
    # Board and rack dimensions
    GRID_SIZE = int(os.environ.get('WORDGRID_GRID_SIZE', '10'))
    RACK_SIZE = int(os.environ.get('WORDGRID_RACK_SIZE', '8'))
    # One word per line, final letter forms already applied
    DICTIONARY_PATH = os.environ.get('WORDGRID_DICTIONARY') or str(DATA_DIR / 'dictionary.txt')
    # Reference document service the clients connect to
    SERVER_URL = os.environ.get('WORDGRID_SERVER_URL', 'http://localhost:8000')
    LOG_LEVEL = os.environ.get('WORDGRID_LOG_LEVEL', 'INFO')
    CORS_ORIGINS = [o.strip() for o in os.environ.get('WORDGRID_CORS_ORIGINS', '*').split(',') if o.strip()]
