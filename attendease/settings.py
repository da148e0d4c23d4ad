# attendease/settings.py

# ──────────────────────────────────────────────────────────────
# Central booking & catalog settings
# Update these values when studio rules or packages change
# ──────────────────────────────────────────────────────────────

# No cancellations inside this window before a session starts
CANCEL_LOCK_MINUTES = 30

# Every booking (or waitlist spot) costs one credit
CREDITS_PER_BOOKING = 1

# Seeded into a fresh data document
DEFAULT_PACKAGES = [
    {"id": "p1", "name": "Starter Pack", "credits": 5, "price": 50},
    {"id": "p2", "name": "Value Pack", "credits": 12, "price": 100},
    {"id": "p3", "name": "Pro Pack", "credits": 30, "price": 220},
]

# Demo accounts for seed_db.py (plaintext passwords, as stored by the app)
DEFAULT_USERS = [
    {"id": "u1", "email": "admin@test.com", "name": "Super Admin", "role": "ADMIN",
     "phoneNumber": "+1 555-0100", "password": "password123"},
    {"id": "u2", "email": "trainer@test.com", "name": "John Trainer", "role": "TRAINER",
     "phoneNumber": "+1 555-0101", "password": "password123"},
    {"id": "u3", "email": "trainee@test.com", "name": "Alice Trainee", "role": "TRAINEE",
     "credits": 10, "phoneNumber": "+1 555-0102", "password": "password123"},
]
