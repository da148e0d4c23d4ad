# init_db.py
from attendease.db import init_db
from attendease.config import DATABASE_URL

if __name__ == "__main__":
    init_db(DATABASE_URL)
    print("✅ DB schema created (app_snapshots)")
