"""
Ollama-backed shopping assistant.

Customer-support chat plus the "đi chợ mỗi ngày" helper that turns a dish
name into a shopping list drawn only from products currently in stock.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

import ollama
from pydantic import BaseModel, ValidationError

from storefront.models.product import Product
from .config import settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = "Xin lỗi, tôi không thể xử lý yêu cầu này. Vui lòng thử lại."
GREETING_MESSAGE = "Xin chào! Tôi là trợ lý AI của siêu thị. Tôi sẵn sàng giúp bạn!"

ASSISTANT_SYSTEM_PROMPT = """Bạn là một trợ lý AI thông minh và thân thiện của siêu thị trực tuyến.
Nhiệm vụ của bạn là hỗ trợ khách hàng với các câu hỏi về:
- Sản phẩm và giá cả
- Đơn hàng và giao hàng
- Khuyến mãi và ưu đãi
- Hướng dẫn sử dụng website
- Giải đáp thắc mắc chung

Hãy trả lời lịch sự, thân thiện, rõ ràng, súc tích và bằng tiếng Việt."""

INGREDIENTS_SYSTEM_PROMPT = """Bạn là một trợ lý ẩm thực chuyên nghiệp.
Bạn CHỈ ĐƯỢC chọn nguyên liệu từ danh sách sản phẩm CÓ SẴN được cung cấp.
Return ONLY valid JSON, no markdown, no explanation."""


class IngredientSuggestion(BaseModel):
    name: str
    quantity: Optional[str] = None
    note: Optional[str] = None


class Ingredient(BaseModel):
    product_id: str
    name: str
    quantity: str
    unit: str = ""
    price: float
    image: str = ""
    note: Optional[str] = None


def _ollama_client() -> ollama.Client:
    return ollama.Client(host=settings.ollama_host or None)


def chat_with_ai(message: str, history: Optional[List[Dict[str, str]]] = None) -> str:
    """
    Ask the assistant one question.

    `history` holds earlier turns as `{"role": "user"|"assistant", "content": ...}`.
    Never raises: any failure of the completion service yields the apology text.
    """
    messages = [
        {"role": "system", "content": ASSISTANT_SYSTEM_PROMPT},
        {"role": "assistant", "content": GREETING_MESSAGE},
    ]
    messages.extend(history or [])
    messages.append({"role": "user", "content": message})

    try:
        logger.info(f"[ASSISTANT] Calling Ollama with prompt: {message[:100]}")
        response = _ollama_client().chat(
            model=settings.ollama_model,
            messages=messages,
            stream=False,
            options={"temperature": 0.7, "top_p": 0.9},
        )
        reply = (response["message"]["content"] or "").strip()
    except Exception as e:
        logger.error(f"[ASSISTANT] Ollama call failed: {str(e)}")
        return APOLOGY_MESSAGE

    return reply or APOLOGY_MESSAGE


def parse_json_from_llm_output(text: str) -> Any:
    """Extract JSON from LLM output, handling markdown code blocks."""
    text = text.strip()

    json_match = re.search(r'```(?:json)?\s*([\s\S]*?)\s*```', text)
    candidate = json_match.group(1).strip() if json_match else text

    try:
        return json.loads(candidate)
    except ValueError:
        pass

    for pattern in (r'(\[[\s\S]*\])', r'(\{[\s\S]*\})'):
        match = re.search(pattern, text)
        if match:
            try:
                return json.loads(match.group(1))
            except ValueError:
                continue

    logger.error("[ASSISTANT] Failed to parse JSON from LLM output")
    logger.info(f"Output (truncated): {text[:500]}")
    return None


def _match_product(name: str, products: List[Product]) -> Optional[Product]:
    wanted = name.lower()
    for p in products:
        have = p.name.lower()
        if wanted in have or have in wanted:
            return p
    return None


def suggest_ingredients(dish_name: str, products: List[Product]) -> List[Ingredient]:
    """
    Ingredients for `dish_name`, each mapped onto an available product.

    Suggestions the model invents outside the product list are dropped.

    Raises:
        RuntimeError: the completion service failed or returned no usable list
    """
    available = [p for p in products if p.is_active and p.in_stock]
    product_list = "\n".join(
        f"- {p.name} ({p.unit or p.quantity or 'N/A'}) - Giá: {p.final_price or p.unit_price}đ"
        for p in available
    )

    prompt = f"""Hãy phân tích món ăn "{dish_name}" và trả về danh sách nguyên liệu cần thiết cho 2-3 người ăn.

DANH SÁCH SẢN PHẨM CÓ SẴN:
{product_list}

Return JSON:
[
  {{"name": "Tên sản phẩm từ danh sách", "quantity": "Số lượng gợi ý", "note": "Ghi chú ngắn gọn"}}
]"""

    try:
        response = _ollama_client().chat(
            model=settings.ollama_model,
            messages=[
                {"role": "system", "content": INGREDIENTS_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            stream=False,
            options={"temperature": 0.3, "top_p": 0.9, "top_k": 40},
        )
        output_text = response["message"]["content"].strip()
    except Exception as e:
        logger.error(f"[ASSISTANT] Ollama call failed: {str(e)}")
        raise RuntimeError("Không thể lấy danh sách nguyên liệu. Vui lòng thử lại sau.") from e

    data = parse_json_from_llm_output(output_text)
    if not isinstance(data, list):
        raise RuntimeError("Không thể lấy danh sách nguyên liệu. Vui lòng thử lại sau.")

    ingredients: List[Ingredient] = []
    for raw in data:
        try:
            suggestion = IngredientSuggestion(**raw)
        except (TypeError, ValidationError) as e:
            logger.warning(f"[ASSISTANT] Skipping invalid suggestion {raw}: {e}")
            continue

        product = _match_product(suggestion.name, available)
        if not product:
            logger.info(f"[ASSISTANT] No product for '{suggestion.name}', skipped")
            continue

        ingredients.append(Ingredient(
            product_id=product.id,
            name=product.name,
            quantity=suggestion.quantity or product.unit or "1",
            unit=product.unit or "",
            price=product.final_price or product.unit_price,
            image=product.image,
            note=suggestion.note,
        ))

    logger.info(f"[ASSISTANT] {len(ingredients)} ingredients for {dish_name}")
    return ingredients
