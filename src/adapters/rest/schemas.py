"""Pydantic models for REST API request/response validation."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


# --- Auth ---

class RegisterBody(BaseModel):
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6)
    username: str = ""


class LoginBody(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    email: str
    role: str


class ProfileOut(BaseModel):
    user_id: int
    email: str
    role: str


# --- Agent ---

class HistoryItem(BaseModel):
    role: str
    content: str


class AgentBody(BaseModel):
    input: str = Field(..., min_length=1)
    chat_id: Optional[str] = None
    conversation_history: Optional[list[HistoryItem]] = None


class AgentOut(BaseModel):
    output: str
    chat_id: str


# --- Chats ---

class ChatCreateBody(BaseModel):
    title: Optional[str] = None


class ChatRenameBody(BaseModel):
    title: str = Field(..., min_length=1)


class ChatMessageBody(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1)


class ConversationOut(BaseModel):
    conversation_id: str
    title: str
    last_message_at: str
    created_at: str


class MessageOut(BaseModel):
    id: int | None
    role: str
    content: str
    created_at: str


class ChatOut(ConversationOut):
    messages: list[MessageOut] = []


# --- Plans ---

class PlanOut(BaseModel):
    id: int
    code: str
    name: str
    category: str
    base_premium: float
    sum_insured: float
    riders: list[str]


# --- Policies ---

class InsuredBody(BaseModel):
    name: str = Field(..., min_length=1)
    relation: str = Field(..., min_length=1)
    dob: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")


class BeneficiaryBody(BaseModel):
    name: str = Field(..., min_length=1)
    relation: str = Field(..., min_length=1)


class PurchaseBody(BaseModel):
    plan_name: str = Field(..., min_length=1)
    insured: InsuredBody
    customer_phone: str = Field(..., min_length=1)
    beneficiaries: list[BeneficiaryBody] = []
    agent_id: Optional[int] = None


class CancelBody(BaseModel):
    reason: Optional[str] = None


# --- Documents ---

class IngestionOut(BaseModel):
    file_name: str
    chunks_stored: int
    message: str
