"""
Question endpoints

Answers never leave the store: players get public copies and submit
candidates to /verify.
"""
from typing import List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from enigma.api.deps import get_store
from enigma.models import Question


router = APIRouter(prefix="/questions", tags=["questions"])


class AnswerPayload(BaseModel):
    answer: str


@router.get("", response_model=List[Question])
async def list_active_questions():
    return await get_store().list_active_questions()


@router.get("/{question_id}", response_model=Question)
async def get_question(question_id: str):
    question = await get_store().get_question(question_id)
    if question is None:
        raise HTTPException(status_code=404, detail=f"Question {question_id} not found")
    return question


@router.post("/{question_id}/verify")
async def verify_answer(question_id: str, payload: AnswerPayload):
    """
    Check a candidate answer

    Response:
        {"correct": true}
    """
    store = get_store()
    if await store.get_question(question_id) is None:
        raise HTTPException(status_code=404, detail=f"Question {question_id} not found")
    return {"correct": await store.check_answer(question_id, payload.answer)}


@router.get("/{question_id}/hints/{index}")
async def get_hint(question_id: str, index: int):
    hint = await get_store().get_hint(question_id, index)
    if hint is None:
        raise HTTPException(status_code=404, detail="Hint not available")
    return {"hint": hint}
