"""
Archetype Library — Immutable Classification Tables

Every classifier in NeuPrint maps numeric scores onto one entry of a
closed table defined here:

  1. RSL level metadata (L1-L6)
  2. Observed cognitive profiles (8 codes) and final types (14 codes)
  3. Reasoning-control centroids (9 patterns) and evidence templates (S1-S18)
  4. Reasoning styles (9) and job groups (15)

The tables are data, not logic. They are loaded once at import time and
never mutated; scorers only read them.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


# ============================================================
# RSL LEVELS
# ============================================================

@dataclass(frozen=True)
class LevelMeta:
    code: str
    short_name: str
    full_name: str
    description: str

    def as_dict(self) -> dict:
        return {
            "level_short_name": self.short_name,
            "level_full_name": self.full_name,
            "level_description": self.description,
        }


LEVEL_CODES = ("L1", "L2", "L3", "L4", "L5", "L6")

LEVEL_METADATA: Mapping[str, LevelMeta] = MappingProxyType({
    m.code: m for m in (
        LevelMeta(
            "L1", "L1 Fragmented", "L1 Fragmented Reasoning",
            "Unstable reasoning with weak structure and low coherence across claims.",
        ),
        LevelMeta(
            "L2", "L2 Linear", "Linear Reasoning",
            "Basic sequential reasoning with limited structural branching or evaluation.",
        ),
        LevelMeta(
            "L3", "L3 Structured", "L3 Structured Reasoning",
            "Organized reasoning components with partial coordination across dimensions.",
        ),
        LevelMeta(
            "L4", "L4 Coordinated", "L4 Coordinated Reasoning",
            "Multiple reasoning dimensions are coordinated with evidence support and evaluation.",
        ),
        LevelMeta(
            "L5", "L5 Integrated", "L5 Integrated Reasoning",
            "Reasoning dimensions integrate into a stable, non-dominant structure "
            "with balanced evaluation.",
        ),
        LevelMeta(
            "L6", "L6 Expert", "L6 Expert Reasoning",
            "Consistently expert-level reasoning with high integration, evaluation depth, "
            "and structural control.",
        ),
    )
})


# ============================================================
# COGNITIVE FINGERPRINT - OBSERVED PROFILES
# ============================================================

@dataclass(frozen=True)
class ProfileMeta:
    code: str
    label: str
    description: str


OBSERVED_PROFILES: tuple[ProfileMeta, ...] = (
    ProfileMeta(
        "RE", "Reflective Explorer",
        "Reflective Explorer shows active self-revision and exploratory restructuring "
        "during reasoning. Thought progresses through reflection, reassessment, and "
        "adaptive refinement.",
    ),
    ProfileMeta(
        "IE", "Intuitive Explorer",
        "Intuitive Explorer advances reasoning through associative leaps and conceptual "
        "exploration. Structure emerges gradually rather than being predefined.",
    ),
    ProfileMeta(
        "EW", "Evidence Weaver",
        "Evidence Weaver emphasizes linking claims with supporting material. Reasoning "
        "strength lies in evidence connectivity rather than abstract inference.",
    ),
    ProfileMeta(
        "AR", "Analytical Reasoner",
        "Analytical Reasoner breaks a problem into explicit components and evaluates them "
        "through stepwise logic. Reasoning emphasizes clear structure, rule-based "
        "validation, and consistency across claims and supporting points.",
    ),
    ProfileMeta(
        "SI", "Strategic Integrator",
        "Strategic Integrator aligns multiple reasoning strands into a unified direction. "
        "Decision-making reflects coordination and long-term framing.",
    ),
    ProfileMeta(
        "RR", "Reflective Regulator",
        "Reflective Regulator actively monitors and controls reasoning boundaries. This "
        "type prioritizes balance, restraint, and intentional stopping points.",
    ),
    ProfileMeta(
        "HE", "Human Expressionist",
        "Human Expressionist expresses reasoning through narrative and contextual meaning. "
        "Communication clarity and human resonance are central.",
    ),
    ProfileMeta(
        "MD", "Machine-Dominant",
        "Machine-Dominant pattern reflects heavy dependence on automated or system-driven "
        "reasoning flow. Human agency signals are limited.",
    ),
)

PROFILE_BY_CODE: Mapping[str, ProfileMeta] = MappingProxyType(
    {p.code: p for p in OBSERVED_PROFILES}
)


# ============================================================
# COGNITIVE FINGERPRINT - FINAL TYPES
# ============================================================

@dataclass(frozen=True)
class TypeMeta:
    code: str
    name: str
    description: str

    @property
    def label(self) -> str:
        return f"{self.code}. {self.name}"


FINAL_TYPES: Mapping[str, TypeMeta] = MappingProxyType({
    t.code: t for t in (
        TypeMeta(
            "T1", "Analytical Reasoner",
            "T1. Analytical Reasoner approaches problems through structured decomposition "
            "and logical sequencing. Reasoning is driven by explicit analysis, rule-based "
            "evaluation, and clear separation of components. This pattern prioritizes "
            "correctness, internal consistency, and stepwise justification.",
        ),
        TypeMeta(
            "T2", "Reflective Thinker",
            "T2. Reflective Thinker emphasizes self-monitoring and internal revision during "
            "reasoning. This pattern frequently revisits prior assumptions, adjusts "
            "interpretations, and refines conclusions through reflection. Reasoning quality "
            "is shaped by iterative reassessment rather than linear progression.",
        ),
        TypeMeta(
            "T3", "Intuitive Explorer",
            "T3. Intuitive Explorer relies on associative thinking and exploratory inference. "
            "Reasoning advances through pattern recognition, conceptual leaps, and hypothesis "
            "generation rather than explicit structure. This pattern prioritizes discovery "
            "and possibility over immediate validation.",
        ),
        TypeMeta(
            "T4", "Strategic Integrator",
            "T4. Strategic Integrator focuses on synthesizing multiple perspectives into a "
            "coherent direction. Reasoning involves alignment of goals, constraints, and "
            "long-term implications. This pattern emphasizes coordination, prioritization, "
            "and purposeful convergence.",
        ),
        TypeMeta(
            "T5", "Human Expressionist",
            "T5. Human Expressionist centers reasoning around meaning, context, and human "
            "experience. Thought is shaped by narrative coherence, emotional nuance, and "
            "communicative clarity. This pattern prioritizes expressiveness and interpretive "
            "depth over formal structure.",
        ),
        TypeMeta(
            "T6", "Machine-Dominant",
            "T6. Machine-Dominant pattern shows strong reliance on external systems or "
            "automated reasoning flows. Decision progression often mirrors templated logic "
            "or system-driven optimization. Human agency and self-directed revision signals "
            "remain limited.",
        ),
        TypeMeta(
            "Ax-1", "Template Generator",
            "Ax-1. Template Generator produces reasoning by following predefined structural "
            "patterns. Responses are consistent and organized but show limited adaptation "
            "beyond the template. Original restructuring signals are minimal.",
        ),
        TypeMeta(
            "Ax-2", "Evidence Synthesizer",
            "Ax-2. Evidence Synthesizer focuses on collecting and linking supporting "
            "information. Reasoning emphasizes aggregation and alignment of evidence rather "
            "than original inference. Conclusions emerge from evidence density rather than "
            "internal exploration.",
        ),
        TypeMeta(
            "Ax-3", "Style Emulator",
            "Ax-3. Style Emulator mirrors linguistic and structural patterns.",
        ),
        TypeMeta(
            "Ax-4", "Reasoning Simulator",
            "Ax-4. Reasoning Simulator reproduces the appearance of structured reasoning "
            "through iterative expansion and recombination. While transitions and revisions "
            "are present, they are driven by simulation rather than genuine internal intent "
            "formation.",
        ),
        TypeMeta(
            "Hx-1", "Draft-Assist",
            "Hx-1. Draft-Assist Type uses AI support primarily for initial idea formation. "
            "Human control increases in later stages through revision and refinement.",
        ),
        TypeMeta(
            "Hx-2", "Structure-Assist",
            "Hx-2. Structure-Assist Type relies on AI to organize and scaffold reasoning. "
            "Core ideas remain human-driven, while structural clarity is externally supported.",
        ),
        TypeMeta(
            "Hx-3", "Evidence-Assist",
            "Hx-3. Evidence-Assist Type leverages AI to gather or arrange supporting "
            "material. Human reasoning determines relevance and final judgment.",
        ),
        TypeMeta(
            "Hx-4", "Reasoning-Assist",
            "Hx-4. Reasoning-Assist Type involves AI participation in intermediate reasoning "
            "steps. Human oversight remains, but reasoning momentum is partially shared.",
        ),
    )
})

TYPE_INTERPRETATIONS: Mapping[str, str] = MappingProxyType({
    "Ax-4": (
        "Reasoning Simulator reflects a reasoning structure that appears coherent and "
        "well-formed, while transitions and revisions are driven by simulated control "
        "patterns rather than direct intent formation."
    ),
})


def type_interpretation(code: str) -> str:
    """Registered interpretation for a final type, or the generic sentence."""
    if code in TYPE_INTERPRETATIONS:
        return TYPE_INTERPRETATIONS[code]
    name = FINAL_TYPES[code].name if code in FINAL_TYPES else code
    return f"{name} reflects the dominant reasoning pattern inferred from the current indicator configuration."


# ============================================================
# REASONING CONTROL - CENTROIDS
# ============================================================

@dataclass(frozen=True)
class ControlPattern:
    key: str
    a: float
    d: float
    r: float
    description: str
    interpretation: str
    rationale: str

    @property
    def label(self) -> str:
        return " ".join(part.capitalize() for part in self.key.split("_"))

    @property
    def vector(self) -> tuple[float, float, float]:
        return (self.a, self.d, self.r)


CONTROL_PATTERNS: tuple[ControlPattern, ...] = (
    ControlPattern(
        "deep_reflective_human", 0.85, 0.80, 0.80,
        "Human-led reasoning with sustained reflective control and stable structural "
        "revision. The current position is centered within the human reasoning cluster.",
        "A high human proportion indicates stable human-led control at structural decision "
        "boundaries across the task.",
        "Reasoning decisions originate from explicit human-driven revision and "
        "counter-evaluative judgment rather than automated continuation flow.",
    ),
    ControlPattern(
        "moderate_reflective_human", 0.80, 0.55, 0.60,
        "Human-led reasoning with localized reflective adjustment and generally stable "
        "structure. The current position remains within the human cluster with moderate "
        "dispersion.",
        "A high human proportion indicates largely human-led control, with reflective "
        "adjustment appearing in localized segments.",
        "Reasoning decisions include limited human revision but do not extend to full "
        "structural reconfiguration.",
    ),
    ControlPattern(
        "moderate_procedural_human", 0.75, 0.55, 0.25,
        "Human-authored reasoning following a stable procedural structure. The current "
        "position lies within the human cluster but closer to the procedural boundary.",
        "A high human proportion indicates human-led control under a procedural sequence, "
        "with limited reflective intervention.",
        "Reasoning decisions follow a predefined structural sequence with minimal "
        "reflective intervention.",
    ),
    ControlPattern(
        "shallow_procedural_human", 0.70, 0.30, 0.20,
        "Human-generated reasoning with shallow procedural progression and limited "
        "structural depth. The current position is weakly anchored within the human "
        "reasoning cluster.",
        "A high human proportion indicates human-led control, though structural decisions "
        "tend to follow shallow continuation patterns.",
        "Reasoning decisions rely on surface-level continuation rather than deliberate "
        "structural control.",
    ),
    ControlPattern(
        "moderate_reflective_hybrid", 0.55, 0.55, 0.55,
        "Mixed-agency reasoning with partial human reflection and assisted structural "
        "development. The current position spans the boundary between human and hybrid "
        "clusters.",
        "A mixed distribution indicates shared control, where human intent is present but "
        "transitions partially reflect assisted continuation.",
        "Reasoning decisions reflect human intent but are partially influenced by assisted "
        "continuation patterns.",
    ),
    ControlPattern(
        "shallow_procedural_hybrid", 0.50, 0.30, 0.20,
        "Hybrid reasoning with procedural structure and limited reflective control. The "
        "current position trends toward the hybrid procedural region.",
        "A mixed distribution indicates assisted procedural flow, with limited human-led "
        "structural revision at decision boundaries.",
        "Reasoning decisions follow assisted procedural flow with minimal human structural "
        "revision.",
    ),
    ControlPattern(
        "shallow_procedural_ai", 0.20, 0.30, 0.15,
        "AI-dominant reasoning with shallow procedural expansion. The current position is "
        "located near the automated cluster perimeter.",
        "A low human proportion indicates control signals are dominated by automated "
        "continuation rather than human-led structural decisions.",
        "Reasoning decisions primarily arise from automated continuation without observable "
        "human control signals.",
    ),
    ControlPattern(
        "moderate_procedural_ai", 0.15, 0.55, 0.15,
        "AI-generated reasoning with stable but non-reflective procedural structure. The "
        "current position is centered within the automated reasoning cluster.",
        "A low human proportion indicates stable automated continuation patterns with "
        "minimal evidence of human-originated structural control.",
        "Reasoning decisions follow internally consistent continuation patterns without "
        "human-originated revision.",
    ),
    ControlPattern(
        "deep_procedural_ai", 0.10, 0.80, 0.10,
        "AI-generated reasoning exhibiting high structural complexity without reflective "
        "control. The current position is deeply embedded within the automated procedural "
        "cluster.",
        "A low human proportion indicates layered procedural expansion without consistent "
        "reflective control signals originating from the individual.",
        "Reasoning decisions reflect layered procedural expansion rather than intentional "
        "evaluative judgment.",
    ),
)


# ============================================================
# REASONING CONTROL - EVIDENCE TEMPLATES
# ============================================================

@dataclass(frozen=True)
class SignalTemplate:
    id: str
    group: str
    priority: int   # lower wins
    text: str


SIGNAL_GROUPS = ("REVISION", "TRANSITION", "COUNTER", "EVIDENCE", "NONAUTO", "SPECIFICITY")

SIGNAL_LIBRARY: tuple[SignalTemplate, ...] = (
    SignalTemplate("S1", "REVISION", 10, "Revision activity occurs at semantic decision boundaries."),
    SignalTemplate("S2", "REVISION", 20, "Argument order adjustments correspond to logical correction."),
    SignalTemplate("S3", "REVISION", 30, "Claim scope or conditions are refined through explicit revision."),
    SignalTemplate("S4", "REVISION", 40, "Prior assumptions are explicitly re-evaluated during reasoning progression."),
    SignalTemplate("S5", "TRANSITION", 10, "Consistency checks appear across structural transitions."),
    SignalTemplate("S6", "TRANSITION", 20, "Logical transitions between claims and supporting reasons are explicitly maintained."),
    SignalTemplate("S7", "TRANSITION", 30, "Structural continuity is preserved across multi-step reasoning transitions."),
    SignalTemplate("S8", "COUNTER", 10, "Alternative viewpoints are introduced and structurally examined."),
    SignalTemplate("S9", "COUNTER", 20, "Counter-arguments are explicitly addressed through refutational reasoning."),
    SignalTemplate("S10", "COUNTER", 30, "Evidence is evaluated against potential contradictions rather than accepted at face value."),
    SignalTemplate("S11", "EVIDENCE", 10, "Multiple evidence types are integrated within the reasoning structure."),
    SignalTemplate("S12", "EVIDENCE", 20, "Evidence placement aligns with the logical role it serves within the argument."),
    SignalTemplate("S13", "EVIDENCE", 30, "Supporting evidence is selectively introduced at structurally relevant points."),
    SignalTemplate("S14", "NONAUTO", 10, "No sustained repetitive propagation is observed across reasoning segments."),
    SignalTemplate("S15", "NONAUTO", 20, "Structural variation is maintained without reliance on template-like repetition."),
    SignalTemplate("S16", "NONAUTO", 30, "Reasoning progression avoids uniform continuation patterns across sections."),
    SignalTemplate("S17", "SPECIFICITY", 10, "Structural behavior reflects document-specific reasoning rather than generic composition patterns."),
    SignalTemplate("S18", "SPECIFICITY", 20, "Observed structural signals vary across sections in response to local reasoning demands."),
)

SIGNAL_BY_ID: Mapping[str, SignalTemplate] = MappingProxyType(
    {s.id: s for s in SIGNAL_LIBRARY}
)


# ============================================================
# ROLE FIT - REASONING STYLES
# ============================================================

@dataclass(frozen=True)
class ReasoningStyle:
    style_id: int
    primary_pattern: str
    representative_phrase: str


REASONING_STYLES: Mapping[int, ReasoningStyle] = MappingProxyType({
    s.style_id: s for s in (
        ReasoningStyle(1, "Reflective Explorer", "structured and exploratory"),
        ReasoningStyle(2, "Reflective Explorer", "structured but exploratory"),
        ReasoningStyle(3, "Analytical Reasoner", "highly structured and deliberate"),
        ReasoningStyle(4, "Intuitive Explorer", "exploratory with emerging structure"),
        ReasoningStyle(5, "Reflective Explorer", "balanced and adaptive"),
        ReasoningStyle(6, "Procedural Thinker", "moderately structured and steady"),
        ReasoningStyle(7, "Creative Explorer", "highly exploratory and fluid"),
        ReasoningStyle(8, "Associative Thinker", "loosely structured with exploration"),
        ReasoningStyle(9, "Linear Responder", "unstructured and linear"),
    )
})


# ============================================================
# ROLE FIT - JOB GROUPS
# ============================================================

@dataclass(frozen=True)
class JobGroup:
    group_id: int
    name: str
    jobs: tuple[tuple[str, str], ...]    # (job_id, job_name)
    interpretation: str


def _jobs(*entries) -> tuple[tuple[str, str], ...]:
    """job_id, or (job_id, display name) where title case isn't right."""
    out = []
    for e in entries:
        if isinstance(e, tuple):
            out.append(e)
        else:
            out.append((e, " ".join(w.capitalize() for w in e.split("_"))))
    return tuple(out)


JOB_GROUPS: tuple[JobGroup, ...] = (
    JobGroup(
        1, "Strategy·Analysis·Policy",
        _jobs("strategy_analyst", "management_analyst", "policy_analyst",
              "economic_researcher", "financial_analyst", "risk_analyst",
              "compliance_officer", "internal_auditor"),
        "Strong in conceptual structuring and strategic direction setting, this profile is "
        "well suited for designing large-scale frameworks and guiding decision alignment "
        "across complex constraints.",
    ),
    JobGroup(
        2, "Data·AI·Intelligence",
        _jobs("data_analyst", "data_scientist", "business_intelligence_analyst",
              "machine_learning_analyst", "statistician", "operations_research_analyst",
              "information_security_analyst"),
        "Demonstrates data-oriented reasoning with strong pattern extraction and hypothesis "
        "testing capacity, making it effective for analytical modeling and evidence-driven "
        "problem solving.",
    ),
    JobGroup(
        3, "Engineering·Technology·Architecture",
        _jobs("software_engineer", "systems_architect", "cloud_engineer",
              ("devops_engineer", "DevOps Engineer"), "network_architect",
              ("qa_engineer", "QA Engineer"), "safety_systems_engineer"),
        "Shows strength in system architecture and technical integration thinking, enabling "
        "efficient translation of requirements into structured, scalable solutions.",
    ),
    JobGroup(
        4, "Product·Service·Innovation",
        _jobs("product_manager", "service_designer", ("ux_planner", "UX Planner"),
              "business_developer", "innovation_manager",
              ("r_and_d_planner", "R&D Planner"), "new_venture_strategist"),
        "Excels in problem framing and value-oriented design, combining user perspective "
        "with iterative experimentation to refine innovative solutions.",
    ),
    JobGroup(
        5, "Education·Research·Training",
        _jobs("teacher", "professor", "instructional_designer", "education_consultant",
              "research_scientist", "research_coordinator", "academic_advisor"),
        "Strong in knowledge structuring and explanatory reasoning, supporting effective "
        "learning design, conceptual clarity, and instructional organization.",
    ),
    JobGroup(
        6, "Psychology·Counseling·Social Care",
        _jobs("counselor", "clinical_psychologist", "school_psychologist", "social_worker",
              "behavioral_therapist", "rehabilitation_specialist"),
        "Demonstrates contextual interpretation and interpersonal sensitivity, enabling "
        "adaptive responses to human behavior and emotionally grounded decision processes.",
    ),
    JobGroup(
        7, "Leadership·Executive·Public Governance",
        _jobs(("ceo_coo_cso", "CEO / COO / CSO"), "public_policy_director",
              "government_administrator", "program_director", "public_strategy_lead"),
        "Shows integrative decision-making ability across multiple priorities, supporting "
        "leadership roles that require coordination, resource alignment, and long-term "
        "direction setting.",
    ),
    JobGroup(
        8, "Marketing·Sales·Communication",
        _jobs("marketing_strategist", "brand_manager", "sales_director",
              ("pr_manager", "PR Manager"), "communication_manager", "media_planner",
              "digital_marketer"),
        "Strong in persuasive communication and audience-oriented reasoning, enabling "
        "effective message framing, influence strategies, and engagement optimization.",
    ),
    JobGroup(
        9, "Design·Content·Media",
        _jobs(("ux_ui_designer", "UX/UI Designer"), "graphic_designer", "video_producer",
              "content_strategist", "creative_director", "editor", "multimedia_artist"),
        "Demonstrates expressive structuring ability, translating abstract ideas into "
        "concrete forms and experiences through visual and narrative organization.",
    ),
    JobGroup(
        10, "Healthcare·Life Science",
        _jobs("physician", "nurse", "medical_researcher", "clinical_data_manager",
              "biomedical_scientist", "public_health_analyst"),
        "Exhibits evidence-based judgment and risk-aware reasoning, supporting decision "
        "making in environments requiring accuracy, safety, and procedural reliability.",
    ),
    JobGroup(
        11, "Law·Compliance·Ethics",
        _jobs("lawyer", "legal_researcher", "compliance_manager", "ethics_officer",
              "regulatory_affairs_specialist", "contract_specialist"),
        "Strong in rule-based reasoning and logical consistency evaluation, enabling precise "
        "interpretation of requirements, regulations, and structured argumentation.",
    ),
    JobGroup(
        12, "Operations·Quality·Safety·Logistics",
        _jobs("operations_manager", "quality_manager", "safety_engineer", "process_analyst",
              "supply_chain_analyst", "logistics_planner"),
        "Shows process optimization and operational stability thinking, supporting efficient "
        "workflow design, quality management, and error prevention.",
    ),
    JobGroup(
        13, "Finance·Investment·Insurance",
        _jobs("investment_analyst", "portfolio_manager", "credit_analyst", "actuary",
              "insurance_underwriter", "treasury_manager"),
        "Demonstrates quantitative judgment and probabilistic reasoning, enabling structured "
        "evaluation of risk, return, and financial decision scenarios.",
    ),
    JobGroup(
        14, "Culture·HR·Organization",
        _jobs(("hr_manager", "HR Manager"), "talent_manager",
              "organizational_development_manager", "culture_manager", "recruiter",
              ("learning_and_development_specialist", "Learning & Development Specialist")),
        "Strong in organizational dynamics interpretation and human system design, "
        "supporting talent development, cultural alignment, and team effectiveness.",
    ),
    JobGroup(
        15, "Automation·Digital Agent",
        _jobs(("rpa_agent", "RPA Agent"), "chatbot_operator",
              ("automated_qa_bot", "Automated QA Bot"), "report_generation_agent",
              ("monitoring_ai", "Monitoring AI")),
        "Shows procedural structuring and automation-oriented reasoning, enabling efficient "
        "decomposition of tasks into repeatable and monitorable workflows.",
    ),
)

GROUP_BY_NAME: Mapping[str, JobGroup] = MappingProxyType({g.name: g for g in JOB_GROUPS})


@dataclass(frozen=True)
class JobEntry:
    job_id: str
    job_name: str
    group_id: int
    group_name: str


JOB_INDEX: Mapping[str, JobEntry] = MappingProxyType({
    job_id: JobEntry(job_id, job_name, g.group_id, g.name)
    for g in JOB_GROUPS
    for job_id, job_name in g.jobs
})


def catalog() -> dict:
    """All tables as plain JSON-ready structures."""
    return {
        "rsl_levels": {code: m.as_dict() for code, m in LEVEL_METADATA.items()},
        "observed_profiles": [
            {"code": p.code, "label": p.label, "description": p.description}
            for p in OBSERVED_PROFILES
        ],
        "final_types": [
            {"code": t.code, "label": t.label, "description": t.description}
            for t in FINAL_TYPES.values()
        ],
        "control_patterns": [
            {"key": c.key, "label": c.label, "centroid": list(c.vector),
             "description": c.description}
            for c in CONTROL_PATTERNS
        ],
        "signal_library": [
            {"id": s.id, "group": s.group, "priority": s.priority, "text": s.text}
            for s in SIGNAL_LIBRARY
        ],
        "reasoning_styles": [
            {"style_id": s.style_id, "primary_pattern": s.primary_pattern,
             "representative_phrase": s.representative_phrase}
            for s in REASONING_STYLES.values()
        ],
        "job_groups": [
            {"group_id": g.group_id, "name": g.name,
             "jobs": [{"job_id": j, "job_name": n} for j, n in g.jobs]}
            for g in JOB_GROUPS
        ],
    }
