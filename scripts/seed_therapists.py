import random
import uuid

from settings import settings
from supabase_client import get_supabase

# ───────────────────────────────────────────────────────────────────────────
# Fake therapist profiles for local matching tests
# ───────────────────────────────────────────────────────────────────────────
CITIES = {
    "Wien": (48.2082, 16.3738),
    "Graz": (47.0707, 15.4395),
    "Linz": (48.3069, 14.2858),
    "Salzburg": (47.8095, 13.0550),
    "Innsbruck": (47.2692, 11.4041),
}

SPECIALTIES_POOL = [
    "Angststörungen", "Panikattacken", "Depression", "Burnout", "Trauma", "PTBS",
    "Beziehungsprobleme", "Paartherapie", "Sucht", "Essstörungen", "Schlafstörungen",
    "Trauer", "Zwangsstörungen", "ADHS", "Berufliche Probleme", "Selbstwert",
]
MODALITIES_POOL = ["Verhaltenstherapie", "EMDR", "Systemische Therapie", "Psychoanalyse", "Gestalttherapie", "ACT"]
LANGUAGES_POOL = ["Deutsch", "Englisch", "Türkisch", "Bosnisch", "Kroatisch", "Serbisch", "Französisch"]
INSURANCE_POOL = ["ÖGK", "BVAEB", "SVS", "Privat", "Zusatzversicherung"]
AVAILABILITY_NOTES = [
    None,
    "Sofort freie Termine",
    "Termine ab nächster Woche",
    "Warteliste - ca. 6 Wochen",
    "Aktuell keine Kapazität",
]


def generate_fake_therapists(n=50):
    therapists = []
    for _ in range(n):
        city = random.choice(list(CITIES))
        lat, lon = CITIES[city]
        price_min = random.randrange(6000, 12000, 500)
        th = {
            "id": str(uuid.uuid4()),
            "display_name": f"Mag. Test {random.randint(1, 999)}",
            "title": "Psychotherapeut:in",
            "specialties": random.sample(SPECIALTIES_POOL, k=random.randint(1, 4)),
            "modalities": random.sample(MODALITIES_POOL, k=random.randint(1, 2)),
            "languages": ["Deutsch"] + random.sample(LANGUAGES_POOL[1:], k=random.randint(0, 2)),
            "online": random.choice([True, False]),
            "city": city,
            "latitude": lat + random.uniform(-0.05, 0.05),
            "longitude": lon + random.uniform(-0.05, 0.05),
            "availability_note": random.choice(AVAILABILITY_NOTES),
            "accepting_clients": random.random() > 0.2,
            "price_min": price_min,
            "price_max": price_min + 2000,
            "accepted_insurance": random.sample(INSURANCE_POOL, k=random.randint(0, 2)),
            "private_practice": random.choice([True, False]),
            "rating": round(random.uniform(3.0, 5.0), 1) if random.random() > 0.3 else None,
            "review_count": random.randint(0, 120),
            "years_experience": random.randint(1, 30),
            "is_public": True,
            "status": "VERIFIED",
        }
        therapists.append(th)
    return therapists


def main(n=50):
    therapists = generate_fake_therapists(n)
    print(f"Uploading {len(therapists)} therapists to {settings.therapist_table}…")
    resp = get_supabase().table(settings.therapist_table).insert(therapists).execute()
    if not resp.data:
        raise RuntimeError(f"Failed to insert therapists: {resp.data}")
    print("Therapists uploaded.")


if __name__ == "__main__":
    main()
