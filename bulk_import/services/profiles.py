from __future__ import annotations

from ..models.config_models import ColumnAlias, ImportProfile, SharedParameter

"""Built-in import profiles.

Column headers are matched through bilingual alias sets: the Spanish header
written by the download template first, the English payload name second.
"""

DOCTORS = ImportProfile(
    entity="doctors",
    label="Doctors",
    endpoint="/administrator/doctors/bulk",
    payload_key="doctors",
    columns=(
        ColumnAlias("name", ("Nombre", "name")),
        ColumnAlias("email", ("Email", "email")),
        ColumnAlias("phone", ("Teléfono", "phone")),
        ColumnAlias("license_number", ("Licencia", "license_number")),
        ColumnAlias("bio", ("Biografía", "bio")),
    ),
    parameters=(
        SharedParameter("country_id", "country"),
        SharedParameter("specialties", "specialties", multiple=True),
    ),
    template_sheet="Doctores",
    template_rows=(
        {
            "Nombre": "Dr. Juan Pérez",
            "Email": "juan.perez@hospital.com",
            "Teléfono": "555-1234",
            "Licencia": "MED-12345",
            "Biografía": "Especialista en cardiología con 15 años de experiencia",
        },
        {
            "Nombre": "Dra. María García",
            "Email": "maria.garcia@clinica.com",
            "Teléfono": "555-5678",
            "Licencia": "MED-67890",
            "Biografía": "Pediatra certificada",
        },
        {
            "Nombre": "Dr. Carlos López",
            "Email": "carlos.lopez@medico.com",
            "Teléfono": "555-9012",
            "Licencia": "MED-34567",
            "Biografía": "Neurólogo con especialización en trastornos del sueño",
        },
    ),
)

SPECIALTIES = ImportProfile(
    entity="specialties",
    label="Specialties",
    endpoint="/administrator/specialties/bulk",
    payload_key="specialties",
    columns=(
        ColumnAlias("name", ("Nombre", "name")),
        ColumnAlias("description", ("Descripción", "description"), default=None),
    ),
    template_sheet="Especialidades",
    template_rows=(
        {
            "Nombre": "Cardiología",
            "Descripción": (
                "Especialidad médica que se encarga del estudio, diagnóstico y "
                "tratamiento de las enfermedades del corazón"
            ),
        },
        {
            "Nombre": "Dermatología",
            "Descripción": "Especialidad médica que se encarga del estudio de la piel",
        },
        {
            "Nombre": "Pediatría",
            "Descripción": "Especialidad médica que estudia al niño y sus enfermedades",
        },
    ),
)

PROFILES: dict[str, ImportProfile] = {p.entity: p for p in (DOCTORS, SPECIALTIES)}


def get_profile(entity: str) -> ImportProfile:
    try:
        return PROFILES[entity]
    except KeyError:
        raise KeyError(f"unknown import entity '{entity}' (known: {sorted(PROFILES)})") from None
