import json
from typing import Optional, Sequence

import openai

from flightsla.config import InsightsConfig, load_insights_config
from flightsla.report import summary_cards
from flightsla.schema import MonthlyAggregate, Record

FALLBACK_TEXT = "Não foi possível gerar insights no momento."
ERROR_TEXT = "Erro ao processar insights com IA."

PROMPT_TEMPLATE = """
Analise os seguintes dados de performance operacional de voos extraídos de uma planilha Google.
Os dados estão em formato JSON.

Dados: {records}
{summary}
Por favor, forneça:
1. Um resumo executivo dos principais indicadores.
2. Identificação de tendências (estão subindo ou descendo?).
3. 3 sugestões acionáveis para melhorar os resultados com base nos números.

Responda em Português do Brasil, usando formatação Markdown clara. Seja direto e profissional.
"""


def build_insights_prompt(
    records: Sequence[Record],
    summary: Optional[MonthlyAggregate] = None,
    sample_size: int = 15,
) -> str:
    """
    Builds the analysis prompt from the first `sample_size` records, plus the
    month's headline numbers when an aggregate is available.
    """
    sample = json.dumps(list(records[:sample_size]), ensure_ascii=False, default=str)
    summary_block = ""
    if summary is not None:
        cards = summary_cards(summary)
        cards["checkpoint_scores"] = summary.checkpoint_scores
        summary_block = f"\nResumo do mês {summary.month:02d}/{summary.year}: {json.dumps(cards, ensure_ascii=False)}\n"
    return PROMPT_TEMPLATE.format(records=sample, summary=summary_block)


def generate_insights(
    records: Sequence[Record],
    summary: Optional[MonthlyAggregate] = None,
    client=None,
    config: Optional[InsightsConfig] = None,
) -> str:
    """
    Asks the language model for an executive reading of the data.

    Args:
        records: Raw sheet records; only the first few are sent.
        summary: Optional monthly aggregate to ground the answer.
        client: An openai.OpenAI-compatible client. Built from config when omitted.
        config: Insights settings; read from the environment when omitted.

    Returns:
        The model's Markdown text, or a fallback message when the model
        returns nothing or the request fails.
    """
    config = config or load_insights_config()
    prompt = build_insights_prompt(records, summary, config.sample_size)

    try:
        client = client or openai.OpenAI(api_key=config.api_key)
        response = client.chat.completions.create(
            model=config.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=config.temperature,
            top_p=config.top_p,
        )
    except openai.OpenAIError as e:
        print(f"Error generating insights: {e}")
        return ERROR_TEXT

    text = response.choices[0].message.content if response.choices else None
    return text or FALLBACK_TEXT
