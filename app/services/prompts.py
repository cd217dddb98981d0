# app/services/prompts.py
"""Instrucciones versionadas que se envían al modelo junto con la imagen.

Cambiar el texto de un prompt es una decisión de despliegue: la tabla es
inmutable en tiempo de ejecución.
"""

from types import MappingProxyType
from typing import Mapping, Optional

from app.core.i18n import Language

PROMPT_VERSION = "1.0.0"

_PROMPT_EN = """You are an expert in occupational ergonomics and biomechanical analysis. Analyze this image of a person at their workstation or performing a work activity.

Evaluate the following ergonomic aspects:
1. Overall body posture (spine, neck, extremities)
2. Musculoskeletal risks by body zone
3. Ergonomic risk factors (angles, repetition, force)
4. Risk level for each affected zone

Respond ONLY with a valid JSON object (no markdown, no code blocks):

{
  "posture_general": "brief professional description of observed posture",
  "risks": [
    {
      "zone": "specific body zone name (Neck, Upper Back, Lower Back, Shoulders, Elbows, Wrists, Hips, Knees, etc.)",
      "level": "high|medium|low",
      "description": "technical description of identified biomechanical risk, including angles if possible"
    }
  ],
  "recommendations": [
    "specific actionable recommendation 1",
    "specific actionable recommendation 2",
    "specific actionable recommendation 3",
    "specific actionable recommendation 4"
  ],
  "ergonomic_score": integer from 0 to 100 (where 100 is perfect posture and 0 is extreme risk)
}

IMPORTANT: Respond ONLY with the JSON object, no additional explanations."""

_PROMPT_ES = """Eres un experto en ergonomía laboral y análisis biomecánico. Analiza esta imagen de una persona en su puesto de trabajo o realizando una actividad laboral.

Evalúa los siguientes aspectos ergonómicos:
1. Postura general del cuerpo (columna, cuello, extremidades)
2. Riesgos musculoesqueléticos por zona corporal
3. Factores de riesgo ergonómico (ángulos, repetición, fuerza)
4. Nivel de riesgo para cada zona afectada

Responde ÚNICAMENTE con un objeto JSON válido (sin markdown, sin bloques de código):

{
  "postura_general": "descripción breve y profesional de la postura observada",
  "riesgos": [
    {
      "zona": "nombre específico de la zona corporal (Cuello, Espalda superior, Espalda baja, Hombros, Codos, Muñecas, Caderas, Rodillas, etc.)",
      "nivel": "alto|medio|bajo",
      "descripcion": "descripción técnica del riesgo biomecánico identificado, incluyendo ángulos si es posible"
    }
  ],
  "recomendaciones": [
    "recomendación específica y accionable 1",
    "recomendación específica y accionable 2",
    "recomendación específica y accionable 3",
    "recomendación específica y accionable 4"
  ],
  "puntuacion_ergonomica": número entero del 0 al 100 (donde 100 es postura perfecta y 0 es riesgo extremo)
}

IMPORTANTE: Responde SOLO con el objeto JSON, sin explicaciones adicionales."""

PROMPT_TEMPLATES: Mapping[Language, str] = MappingProxyType({
    Language.ENGLISH: _PROMPT_EN,
    Language.SPANISH: _PROMPT_ES,
})


def get_prompt(language: Optional[str]) -> str:
    """Devuelve el prompt del idioma pedido; español si la etiqueta no se reconoce."""
    return PROMPT_TEMPLATES[Language.resolve(language)]
