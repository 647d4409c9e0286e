from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from classbook.api.v1.class_levels.router import router as class_levels_router
from classbook.api.v1.class_teachers.router import router as class_teachers_router
from classbook.api.v1.classes.classes_router import router as classes_router
from classbook.api.v1.schools.router import router as schools_router
from classbook.api.v1.students.router import router as students_router
from classbook.api.v1.subjects.router import router as subjects_router
from classbook.api.v1.teachers.router import router as teachers_router
from classbook.api.v1.terms.router import router as terms_router
from classbook.api.v1.timetables.router import router as timetables_router
from classbook.api.v1.workloads.router import router as workloads_router
from classbook.core.config import settings
from classbook.core.logging import configure_logging


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Classbook Backend")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(schools_router)
    app.include_router(class_levels_router)
    app.include_router(classes_router)
    app.include_router(class_teachers_router)
    app.include_router(teachers_router)
    app.include_router(students_router)
    app.include_router(subjects_router)
    app.include_router(terms_router)
    app.include_router(workloads_router)
    app.include_router(timetables_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
