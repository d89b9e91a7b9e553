from fastapi import FastAPI, HTTPException
from carerota.errors import InputValidationError
from carerota.models import ProblemInput, ScheduleResult
from carerota.optimizer import optimize_schedule

app = FastAPI(title="Care Facility Shift Optimizer")

@app.get("/health")
def health():
    return {"status": "ok"}

@app.post("/optimize", response_model=ScheduleResult)
def optimize(problem: ProblemInput):
    """Build a schedule for the posted roster and date range."""
    try:
        return optimize_schedule(problem)
    except InputValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
