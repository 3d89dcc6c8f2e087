"""Travel chat assistant — multilingual, age-aware, able to drive the UI via agent actions.

The LLM is asked to answer with JSON of the form
``{"message": str, "actions": [{"type", "target", "value"?, "description"}]}``.
Actions tell the front end to scroll, click, fill, navigate or highlight;
anything else the model invents is dropped before it reaches the client.
"""

import json
import logging
import re
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.models.activity import ChatConversation
from michels_travel.services.llm_client import llm_client

logger = logging.getLogger(__name__)

AGENT_ACTION_TYPES = ("scroll", "click", "fill", "navigate", "highlight")
ELDERLY_AGE = 60
HISTORY_WINDOW = 10
STORED_HISTORY_LIMIT = 50

AGE_PATTERNS = [
    re.compile(r"(?:tenho|sou|I am|I'm|tengo|soy)\s+(\d+)\s*(?:anos?|years?|años?)", re.IGNORECASE),
    re.compile(r"(\d+)\s*(?:anos?|years?|años?)", re.IGNORECASE),
    re.compile(r"(?:idade|age|edad)[\s:]+(\d+)", re.IGNORECASE),
]

PT_BOOKING_KEYWORDS = ("voos", "viagem", "passagem", "reservar", "comprar")
PT_AGE_PROMPT = "Para oferecer o melhor atendimento, poderia me informar sua idade?"
PT_AGE_QUESTION = "Qual é a sua idade?"

APOLOGIES = {
    "en": "I'm sorry, I couldn't process your request right now. Please try again in a moment.",
    "pt": "Desculpe, não consegui processar sua solicitação agora. Por favor, tente novamente em instantes.",
    "es": "Lo siento, no pude procesar tu solicitud ahora. Por favor, inténtalo de nuevo en un momento.",
}

_RESPONSE_FORMAT = """
Reply ONLY with a JSON object:
{"message": "<your answer>", "actions": [{"type": "scroll|click|fill|navigate|highlight", "target": "<css selector or path>", "value": "<optional value>", "description": "<what the action does>"}]}
Use an empty actions list when no interface action is needed."""

SYSTEM_PROMPTS = {
    "en": """You are the travel assistant of Michel's Travel, a flight booking agency. Be efficient, warm and professional.

You help customers find flights, plan trips, understand documentation and visa requirements, and complete bookings on the site.

Ask for the customer's age early if it is unknown. Customers aged 60 or over get extra care: short sentences, plain words, one step at a time, patience and reassurance, and an offer of accessibility help.

You can guide the page with actions: scroll to a section, click a button or link, fill a form field, navigate to a page, or highlight information. Describe every action clearly.

Always answer in English.""",
    "pt": """Você é o assistente de viagens da Michel's Travel, uma agência de passagens aéreas. Seja eficiente, acolhedor e profissional.

Você ajuda clientes a encontrar voos, planejar viagens, entender documentação e vistos, e concluir reservas no site.

Pergunte a idade do cliente logo no início se ela não for conhecida. Clientes com 60 anos ou mais recebem atenção extra: frases curtas, palavras simples, um passo de cada vez, paciência, tranquilidade e oferta de ajuda com acessibilidade.

Você pode guiar a página com ações: rolar até uma seção, clicar em um botão ou link, preencher um campo, navegar para uma página ou destacar uma informação. Descreva cada ação com clareza.

Responda sempre em português.""",
    "es": """Eres el asistente de viajes de Michel's Travel, una agencia de vuelos. Sé eficiente, cálido y profesional.

Ayudas a los clientes a encontrar vuelos, planificar viajes, entender la documentación y los visados, y completar reservas en el sitio.

Pregunta la edad del cliente al principio si no la conoces. Los clientes de 60 años o más reciben atención especial: frases cortas, palabras sencillas, un paso a la vez, paciencia, tranquilidad y ayuda con accesibilidad.

Puedes guiar la página con acciones: desplazarte a una sección, hacer clic en un botón o enlace, rellenar un campo, navegar a una página o resaltar información. Describe cada acción con claridad.

Responde siempre en español.""",
}


def extract_age(message: str) -> int | None:
    """Find a stated age ("tenho 67 anos", "I'm 45 years old", "edad: 70")."""
    for pattern in AGE_PATTERNS:
        match = pattern.search(message)
        if match:
            age = int(match.group(1))
            if 0 <= age <= 150:
                return age
    return None


def is_elderly(age: int | None) -> bool:
    return age is not None and age >= ELDERLY_AGE


def build_system_prompt(language: str, user_age: int | None = None) -> str:
    prompt = SYSTEM_PROMPTS.get(language, SYSTEM_PROMPTS["en"])
    if is_elderly(user_age):
        prompt += f"\n\nCURRENT CUSTOMER: {user_age} years old, give extra attention and care."
    return prompt + "\n" + _RESPONSE_FORMAT


def validate_actions(raw_actions) -> list[dict]:
    """Keep well-formed actions with a known type."""
    if not isinstance(raw_actions, list):
        return []
    actions = []
    for item in raw_actions:
        if not isinstance(item, dict):
            continue
        action_type = item.get("type")
        target = item.get("target")
        if action_type not in AGENT_ACTION_TYPES or not isinstance(target, str) or not target:
            continue
        action = {
            "type": action_type,
            "target": target,
            "description": str(item.get("description") or ""),
        }
        if item.get("value") is not None:
            action["value"] = str(item["value"])
        actions.append(action)
    return actions


def parse_reply(raw: str) -> dict:
    """Turn the model output into {message, actions}; plain text becomes a message with no actions."""
    text = raw.strip()
    if text.startswith("```"):
        lines = [line for line in text.split("\n") if not line.strip().startswith("```")]
        text = "\n".join(lines).strip()
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return {"message": raw.strip(), "actions": []}
    if not isinstance(parsed, dict):
        return {"message": raw.strip(), "actions": []}
    message = parsed.get("message")
    return {
        "message": message if isinstance(message, str) and message else raw.strip(),
        "actions": validate_actions(parsed.get("actions")),
    }


class ChatAssistant:
    """Runs one chat turn and persists the conversation per session."""

    async def get_conversation(self, db: AsyncSession, session_id: str) -> ChatConversation | None:
        result = await db.execute(select(ChatConversation).where(ChatConversation.session_id == session_id))
        return result.scalar_one_or_none()

    async def reply(
        self,
        db: AsyncSession,
        session_id: str,
        message: str,
        language: str = "en",
        user_age: int | None = None,
        user_id: uuid.UUID | None = None,
    ) -> dict:
        conversation = await self.get_conversation(db, session_id)
        if conversation is None:
            conversation = ChatConversation(session_id=session_id, user_id=user_id, messages=[], language=language)
            db.add(conversation)
        conversation.language = language
        if user_id and not conversation.user_id:
            conversation.user_id = user_id

        age = user_age or conversation.user_age or extract_age(message)
        if age is not None and conversation.user_age is None:
            conversation.user_age = age

        history = list(conversation.messages or [])
        needs_user_input = None

        if age is None and language == "pt" and any(k in message.lower() for k in PT_BOOKING_KEYWORDS):
            reply = {"message": PT_AGE_PROMPT, "actions": []}
            needs_user_input = {"field": "age", "question": PT_AGE_QUESTION}
        else:
            llm_messages = history[-HISTORY_WINDOW:] + [{"role": "user", "content": message}]
            try:
                raw = await llm_client.complete(
                    system=build_system_prompt(language, age),
                    messages=llm_messages,
                    json_mode=True,
                )
                reply = parse_reply(raw)
            except RuntimeError as e:
                logger.error(f"Chat assistant failed for session {session_id}: {e}")
                reply = {"message": APOLOGIES.get(language, APOLOGIES["en"]), "actions": []}

        history.append({"role": "user", "content": message})
        history.append({"role": "assistant", "content": reply["message"]})
        # Reassign so the JSON column is flagged dirty
        conversation.messages = history[-STORED_HISTORY_LIMIT:]
        await db.commit()

        response = {
            "session_id": session_id,
            "message": reply["message"],
            "actions": reply["actions"],
            "user_age": age,
            "is_elderly": is_elderly(age),
        }
        if needs_user_input:
            response["needs_user_input"] = needs_user_input
        return response

    async def get_history(self, db: AsyncSession, session_id: str) -> list[dict]:
        conversation = await self.get_conversation(db, session_id)
        return list(conversation.messages or []) if conversation else []


chat_assistant = ChatAssistant()
