"""Creates the ticketing tables directly, for local setups that skip migrations."""
from app import create_app, db

app = create_app()
with app.app_context():
    from app import models
    print("Creating ticketing tables...")
    db.create_all()
    print(f"Done. Mint mode: {app.extensions['ticketing'].mints.mode.value}")
