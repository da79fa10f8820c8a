# services/prompts.py
"""Prompt and canned-answer builders for answer generation (Korean-language service)"""
from typing import List, Optional, Sequence

from core.domain import FaqEntry, OfficialDocument, Question

DRAFT_SYSTEM_HEADER = """당신은 경상남도 광역지원기관의 공문 Q&A 담당 AI 어시스턴트입니다.
사회복지사들의 질문에 대해 공문 원문 및 내부 지식 베이스를 참조하여 정확하고 친절한 답변 초안을 작성합니다.

답변 작성 시 주의사항:
- 제공된 [관련 공문] 및 [내부 지식 베이스]에 근거한 답변만 작성하세요
- 근거가 없는 내용은 "해당 내용은 확인되지 않습니다"라고 안내하세요
- 답변은 마크다운 형식으로 구조화해주세요
- 관련 조항이나 항목을 구체적으로 인용하세요
- 추가 확인이 필요한 사항은 명시해주세요
"""

DRAFT_NOTICE = "> 이 답변은 AI가 자동 생성한 초안입니다. 관리자 검토 후 최종 답변이 전달됩니다."

CANNED_DRAFTS = {
    "사업지침": """공문 원문 및 지식 베이스를 검토한 결과, 질문하신 내용에 대해 다음과 같이 안내드립니다.

**주요 답변 내용:**
1. 해당 사업지침에 따르면, 관련 규정이 적용됩니다
2. 세부 사항은 사업안내서를 참고해주세요
3. 추가 문의사항이 있으시면 광역지원기관으로 연락 부탁드립니다

""" + DRAFT_NOTICE,
    "행정절차": """행정절차 관련 문의에 대해 안내드립니다.

**처리 절차:**
1. 해당 서류를 준비하여 제출합니다
2. 담당부서에서 검토 후 결과를 통보합니다
3. 처리 기간은 통상 7~14일 소요됩니다

""" + DRAFT_NOTICE,
}
DEFAULT_CANNED_CATEGORY = "사업지침"


def build_draft_system_prompt(
    related_doc: Optional[OfficialDocument],
    similar_qas: Sequence[Question],
    context_chunks: Sequence[str] = (),
    similar_limit: int = 3,
) -> str:
    prompt = DRAFT_SYSTEM_HEADER

    if related_doc:
        prompt += f"""
## 관련 공문 정보
- 공문번호: {related_doc.document_number}
- 제목: {related_doc.title}

### 공문 원문 내용:
{related_doc.content}
"""

    if context_chunks:
        prompt += "\n## 내부 지식 베이스 (참고 자료)\n다음은 질문과 관련된 매뉴얼 및 규정 내용입니다:\n"
        for index, chunk in enumerate(context_chunks, start=1):
            prompt += f"\n[참고 {index}]\n{chunk}\n"

    if similar_qas:
        prompt += "\n## 기존 유사 Q&A 이력 (참고용)\n"
        for qa in list(similar_qas)[:similar_limit]:
            answer = qa.final_answer or qa.ai_draft_answer or "(미답변)"
            prompt += f"\n### Q: {qa.title}\n{qa.content}\n\n### A:\n{answer}\n"

    return prompt


def build_draft_user_prompt(question: Question) -> str:
    return f"""## 질문
**제목**: {question.title}
**카테고리**: {question.category}
**기관**: {question.author_org_name}

**질문 내용**:
{question.content}

위 질문에 대한 답변 초안을 작성해주세요."""


def build_canned_draft(category: str, context_count: int) -> str:
    answer = CANNED_DRAFTS.get(category, CANNED_DRAFTS[DEFAULT_CANNED_CATEGORY])
    if context_count > 0:
        answer += f"\n\n(참고: 내부 지식 베이스에서 {context_count}개의 관련 규정을 확인했습니다.)"
    return answer


def build_instant_system_prompt(document: OfficialDocument) -> str:
    return f"""당신은 경상남도 광역지원기관의 공문 Q&A 담당 AI입니다.
반드시 공문 원문에 근거해서 답변하세요.
원문에 없는 내용은 답변하지 말고 '해당 내용은 공문에 명시되어 있지 않습니다'라고 안내하세요.
답변 끝에 항상 '[{document.document_number} 공문 기준]' 출처를 표시하세요.

## 공문 정보
- 제목: {document.title}
- 공문번호: {document.document_number}

### 공문 원문:
{document.content}
"""


def build_instant_user_prompt(question: str, approved_faqs: List[FaqEntry]) -> str:
    if not approved_faqs:
        return question
    faq_lines = "\n".join(f"Q: {f.question}\nA: {f.answer}" for f in approved_faqs)
    return f"참고할 만한 기존 FAQ:\n{faq_lines}\n\n질문: {question}"


def build_canned_instant_answer(question: str, document: OfficialDocument) -> str:
    return (
        f"**[AI 답변]**\n\n{document.title} 공문을 기준으로 답변드립니다.\n\n"
        f"질문하신 \"{question}\"에 대해:\n공문 원문에 따르면, 해당 내용은 다음과 같습니다.\n\n"
        f"{document.content[:300]}\n\n> 자세한 사항은 공문 원문을 참고해주세요.\n\n"
        f"[{document.document_number} 공문 기준]"
    )
