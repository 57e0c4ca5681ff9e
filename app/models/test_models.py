# app/models/test_models.py
from datetime import date

import pytest

from app.models.appointment import Appointment, AppointmentStatus, ServiceType, TimeSlot
from app.models.pet import Pet, PetSpecies, PetType, PetGender
from app.models.profile import Profile, UserRole


@pytest.mark.parametrize("text, expected", [
    ("vaccination", ServiceType.VACCINATION),
    ("Vaccination", ServiceType.VACCINATION),
    ("Rabies shot", ServiceType.VACCINATION),
    ("spay/neuter", ServiceType.SURGERY),
    ("Full grooming + bath", ServiceType.GROOMING),
    ("Annual check-up", ServiceType.CHECKUP),
    ("deworming", ServiceType.DEWORMING),
    ("Dental cleaning", ServiceType.OTHER),
    ("", ServiceType.OTHER),
    (None, ServiceType.OTHER),
])
def test_service_type_parse(text, expected):
    assert ServiceType.parse(text) is expected


@pytest.mark.parametrize("text, expected", [
    ("Pending", AppointmentStatus.PENDING),
    ("confirmed", AppointmentStatus.CONFIRMED),
    ("scheduled", AppointmentStatus.PENDING),
    ("canceled", AppointmentStatus.CANCELLED),
    ("in-progress", AppointmentStatus.CONFIRMED),
])
def test_status_parse_accepts_legacy_values(text, expected):
    assert AppointmentStatus.parse(text) is expected


def test_status_parse_rejects_unknown():
    with pytest.raises(ValueError):
        AppointmentStatus.parse("lost")


def test_time_slots_display_and_schedule():
    assert [s.display_time for s in TimeSlot] == ["9:00 AM", "1:00 PM", "5:00 PM"]
    appointment = Appointment(appointment_id="a", owner_name="Ana", pet_name="Mochi", service=ServiceType.CHECKUP,
                              date=date(2026, 10, 20), time_slot=TimeSlot.AFTERNOON)
    assert appointment.scheduled_at.hour == 13
    assert Appointment.from_record(appointment.to_record()).time == "1:00 PM"


def test_unknown_slot_in_record_defaults_to_morning():
    record = {'id': "a", 'owner_name': "Ana", 'pet_name': "Mochi", 'service': "checkup",
              'appointment_date': "2026-10-20", 'time_slot': "night", 'status': "Pending"}
    assert Appointment.from_record(record).time_slot is TimeSlot.MORNING


def test_species_encoding_and_labels():
    gecko = PetSpecies.parse("reptile:gecko")
    assert gecko.pet_type is PetType.REPTILE
    assert gecko.encode() == "reptile:gecko"
    assert gecko.label == "Gecko (Reptile)"
    assert PetSpecies.parse("Cat").encode() == "cat"
    ferret = PetSpecies.parse("ferret")
    assert ferret.pet_type is PetType.OTHER
    assert ferret.label == "Ferret"


def test_pet_record_falls_back_to_type_and_default_gender():
    pet = Pet.from_record({'id': "p1", 'owner_id': "user-1", 'name': "Mochi", 'type': "rabbit",
                           'birth_date': "2024-02-01", 'gender': "unknown", 'weight': 2})
    assert pet.species.pet_type is PetType.RABBIT
    assert pet.gender is PetGender.MALE
    assert pet.weight == "2"


def test_profile_role_round_trip():
    admin = Profile(profile_id="u1", name="Admin", email="a@clinic.test", role=UserRole.ADMIN)
    assert Profile.from_record(admin.to_record()).is_admin
    assert Profile.from_record({'id': "u2", 'role': "superuser"}).role is UserRole.CUSTOMER
