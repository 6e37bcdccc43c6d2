# scripts/seed_demo.py
import random

from studio.db import Base, SessionLocal, engine
from studio import models
from studio.engine.scores import resolve_scores
from studio.reference import load_reference_data
from studio.settings import get_settings


def _demo_scores(ref, rng: random.Random) -> dict:
    # two or three elevated schemas per coachee, the rest near the norm
    ids = ref.mapping.clinical_ids()
    elevated = set(rng.sample(ids, rng.randint(2, 3)))
    return {
        cid: round(rng.uniform(1.0, 2.5) if cid in elevated else rng.gauss(0.0, 0.6), 2)
        for cid in ids
    }


def seed_demo(n: int = 8, seed: int = 7):
    settings = get_settings()
    ref = load_reference_data(settings.DATA_DIR or None)
    rng = random.Random(seed)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(models.Assessment).first():
            print("Assessments already present; nothing seeded.")
            return

        rows = []
        for i in range(n):
            resolved = resolve_scores(_demo_scores(ref, rng), ref.mapping)
            rows.append(models.Assessment(
                client_ref=f"demo_coachee_{i}",
                source=models.SourceEnum.IMPORT,
                scores=resolved.z_by_schema(),
                skipped=[s.as_dict() for s in resolved.skipped],
                app_version=settings.APP_VERSION,
                reference_version=settings.REFERENCE_VERSION,
                schema_version=settings.SCHEMA_VERSION,
            ))
        db.add_all(rows)
        db.commit()
        print(f"Seeded {len(rows)} demo assessments.")
    finally:
        db.close()


if __name__ == "__main__":
    seed_demo()
