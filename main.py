"""FastAPI Backend - travel planning chat assistant"""
import json
import logging

# Load .env before anything else
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel
from typing import Any, Dict, List, Literal, Optional

import config
from database import init_db, get_db, touch, conversation_title, Conversation, Message
from agents import POIAgent, WeatherAgent
from agents.errors import PlanningError
from agents.outcomes import Degraded
from agents.planning_agent import planning_agent

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("server")

# Initialize database
init_db()

# FastAPI app
app = FastAPI(
    title="Travel Planner API",
    description="Chat assistant that turns a trip request into a weather-aware itinerary",
    version="1.0.0"
)

# CORS - answers the browser's pre-flight OPTIONS request on every route
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


# Pydantic models
class PlanTripRequest(BaseModel):
    prompt: str

class WeatherRequest(BaseModel):
    destination: str

class PoiRequest(BaseModel):
    destination: str
    interests: List[str] = []

class ConversationCreate(BaseModel):
    user_id: str
    title: str

class MessageCreate(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    thinking: Optional[List[str]] = None
    itinerary: Optional[Dict[str, Any]] = None


def _error(message: str, status_code: int, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def _db():
    db = get_db()
    try:
        yield db
    finally:
        db.close()


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return _error(f"Invalid request body: {exc.errors()}", 400)


# ---------------------------------------------------------------------------
# Planning endpoints
# ---------------------------------------------------------------------------

@app.post("/plan-trip")
def plan_trip(body: PlanTripRequest):
    if not body.prompt.strip():
        return _error("prompt is required", 400)

    logger.info("Received travel request: %s", body.prompt)
    try:
        envelope = planning_agent.plan_trip(body.prompt)
    except PlanningError as exc:
        logger.exception("Error in plan-trip")
        return _error(str(exc), 500)
    except Exception as exc:
        logger.exception("Unexpected error in plan-trip")
        return _error(str(exc) or "Unknown error", 500)

    return envelope.to_dict()


@app.post("/plan-trip/stream")
def plan_trip_stream(body: PlanTripRequest):
    """SSE endpoint - streams reasoning steps as the plan is built."""
    if not body.prompt.strip():
        return _error("prompt is required", 400)

    def event_generator():
        try:
            for event in planning_agent.plan_trip_stream(body.prompt):
                yield f"data: {json.dumps(event, default=str)}\n\n"
        except Exception as exc:
            logger.exception("Unexpected error in plan-trip stream")
            yield f"data: {json.dumps({'type': 'error', 'message': str(exc)})}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


# ---------------------------------------------------------------------------
# Enrichment lookups
# ---------------------------------------------------------------------------

@app.post("/get-weather")
def get_weather(body: WeatherRequest):
    outcome = WeatherAgent.fetch_forecast(body.destination)
    if isinstance(outcome, Degraded):
        return _error(outcome.reason, 500, forecast=[], location=body.destination)
    return {
        "forecast": [day.to_dict() for day in outcome.value],
        "location": body.destination,
    }


@app.post("/get-poi")
def get_poi(body: PoiRequest):
    outcome = POIAgent.fetch_pois(body.destination, body.interests)
    if isinstance(outcome, Degraded):
        return _error(outcome.reason, 500, pois=[], location=body.destination)
    return {
        "pois": [poi.to_dict() for poi in outcome.value],
        "location": body.destination,
    }


# ---------------------------------------------------------------------------
# Conversation store
# ---------------------------------------------------------------------------

def _conversation_json(c: Conversation) -> dict:
    return {
        "id": c.id,
        "user_id": c.user_id,
        "title": c.title,
        "created_at": c.created_at.isoformat(),
        "updated_at": c.updated_at.isoformat(),
    }

def _message_json(m: Message) -> dict:
    return {
        "id": m.id,
        "conversation_id": m.conversation_id,
        "role": m.role,
        "content": m.content,
        "thinking": m.thinking,
        "itinerary": m.itinerary,
        "created_at": m.created_at.isoformat(),
    }


@app.post("/conversations")
def create_conversation(body: ConversationCreate, db=Depends(_db)):
    conversation = Conversation(user_id=body.user_id, title=conversation_title(body.title))
    db.add(conversation)
    db.commit()
    db.refresh(conversation)
    return _conversation_json(conversation)


@app.get("/conversations")
def list_conversations(user_id: str, db=Depends(_db)):
    conversations = (
        db.query(Conversation)
        .filter(Conversation.user_id == user_id)
        .order_by(Conversation.updated_at.desc())
        .all()
    )
    return [_conversation_json(c) for c in conversations]


@app.delete("/conversations/{conversation_id}")
def delete_conversation(conversation_id: str, db=Depends(_db)):
    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    if not conversation:
        return _error("Conversation not found", 404)

    db.delete(conversation)
    db.commit()
    return {"message": "Conversation deleted"}


@app.get("/conversations/{conversation_id}/messages")
def list_messages(conversation_id: str, db=Depends(_db)):
    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    if not conversation:
        return _error("Conversation not found", 404)
    return [_message_json(m) for m in conversation.messages]


@app.post("/conversations/{conversation_id}/messages")
def add_message(conversation_id: str, body: MessageCreate, db=Depends(_db)):
    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    if not conversation:
        return _error("Conversation not found", 404)

    message = Message(
        conversation_id=conversation.id,
        role=body.role,
        content=body.content,
        thinking=body.thinking,
        itinerary=body.itinerary,
    )
    db.add(message)
    touch(conversation)
    db.commit()
    db.refresh(message)
    return _message_json(message)


# Health check
@app.get("/health")
def health_check():
    return {
        "status": "ok",
        "version": "1.0.0",
        "llm": config.llm_name(),
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
