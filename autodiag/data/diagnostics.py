"""
Static diagnosis table and keyword index.

Record text is Portuguese, as shown to end users. KEYWORDS is scanned in
insertion order by the symptom matcher, so its ordering decides which
diagnosis wins when an input mentions keywords from several of them.
"""
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple

from pydantic import BaseModel, ConfigDict


class VehicleZone(str, Enum):
    ENGINE = "engine"
    FRONT_SUSPENSION = "front-suspension"
    BRAKES = "brakes"
    EXHAUST = "exhaust"
    REAR_SUSPENSION = "rear-suspension"
    NONE = "none"


class Urgency(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Complexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class PartInfo(_Frozen):
    name: str
    image: str
    function: str
    symptoms: Tuple[str, ...]


class RecommendedAction(_Frozen):
    steps: Tuple[str, ...]
    complexity: Complexity
    tools: Tuple[str, ...]
    estimated_time: str


class StructuredPrompt(_Frozen):
    """Coded symptom fields handed to the assistant as context."""

    symptom: str
    location: str
    condition: str
    severity: str


class DiagnosisRecord(_Frozen):
    id: str
    zone: VehicleZone
    fault: str
    urgency: Urgency
    description: str
    part: PartInfo
    action: RecommendedAction
    structured_prompt: StructuredPrompt


_PLACEHOLDER_IMAGE = "/placeholder.svg"

DIAGNOSES: Mapping[str, DiagnosisRecord] = MappingProxyType({
    "freios": DiagnosisRecord(
        id="freios-001",
        zone=VehicleZone.BRAKES,
        fault="Desgaste das Pastilhas de Freio",
        urgency=Urgency.HIGH,
        description=(
            "As pastilhas de freio apresentam desgaste excessivo, reduzindo a capacidade de "
            "frenagem do veículo. Isso compromete a segurança e pode danificar os discos de freio."
        ),
        part=PartInfo(
            name="Pastilha de Freio Dianteira",
            image=_PLACEHOLDER_IMAGE,
            function=(
                "Responsável por criar atrito contra o disco de freio, convertendo energia "
                "cinética em calor para desacelerar o veículo."
            ),
            symptoms=(
                "Ruído de chiado ao frear",
                "Pedal de freio esponjoso",
                "Aumento da distância de frenagem",
                "Vibração ao frear",
            ),
        ),
        action=RecommendedAction(
            steps=(
                "Suspender o veículo e remover as rodas",
                "Remover o cáliper de freio",
                "Retirar as pastilhas antigas",
                "Limpar o suporte e aplicar graxa nos pontos de contato",
                "Instalar as novas pastilhas",
                "Remontar o cáliper e rodas",
                "Testar o sistema de freios",
            ),
            complexity=Complexity.MODERATE,
            tools=("Chave de roda", "Macaco hidráulico", "Chave Allen", "Graxa para freios", "Saca-pinos"),
            estimated_time="1-2 horas",
        ),
        structured_prompt=StructuredPrompt(
            symptom="ruido_frenagem",
            location="sistema_freios",
            condition="ao_frear",
            severity="alta",
        ),
    ),
    "motor": DiagnosisRecord(
        id="motor-001",
        zone=VehicleZone.ENGINE,
        fault="Superaquecimento do Motor",
        urgency=Urgency.HIGH,
        description=(
            "O sistema de arrefecimento não está funcionando corretamente, causando elevação "
            "anormal da temperatura do motor. Pode indicar problema na bomba d'água ou radiador."
        ),
        part=PartInfo(
            name="Radiador e Bomba D'água",
            image=_PLACEHOLDER_IMAGE,
            function=(
                "O radiador dissipa o calor do líquido de arrefecimento, enquanto a bomba d'água "
                "circula o fluido pelo motor para manter a temperatura ideal de funcionamento."
            ),
            symptoms=(
                "Ponteiro de temperatura no vermelho",
                "Vapor saindo do capô",
                "Perda de líquido de arrefecimento",
                "Luz de alerta de temperatura acesa",
            ),
        ),
        action=RecommendedAction(
            steps=(
                "Desligar o motor e aguardar esfriar",
                "Verificar nível do líquido de arrefecimento",
                "Inspecionar mangueiras e conexões",
                "Testar funcionamento do ventilador",
                "Verificar estado da bomba d'água",
                "Realizar teste de pressão do sistema",
                "Substituir componentes defeituosos",
            ),
            complexity=Complexity.COMPLEX,
            tools=(
                "Kit de teste de pressão",
                "Termômetro infravermelho",
                "Chaves combinadas",
                "Recipiente para drenagem",
            ),
            estimated_time="2-4 horas",
        ),
        structured_prompt=StructuredPrompt(
            symptom="superaquecimento",
            location="motor",
            condition="em_funcionamento",
            severity="critica",
        ),
    ),
    "suspensao": DiagnosisRecord(
        id="suspensao-001",
        zone=VehicleZone.FRONT_SUSPENSION,
        fault="Desgaste da Bieleta da Barra Estabilizadora",
        urgency=Urgency.MEDIUM,
        description=(
            "A bieleta da barra estabilizadora está desgastada, causando ruídos de batida ao "
            "passar em irregularidades. Afeta a estabilidade do veículo em curvas."
        ),
        part=PartInfo(
            name="Bieleta da Barra Estabilizadora",
            image=_PLACEHOLDER_IMAGE,
            function=(
                "Conecta a barra estabilizadora à suspensão, transmitindo forças que reduzem a "
                "inclinação da carroceria em curvas e melhoram a dirigibilidade."
            ),
            symptoms=(
                "Ruído de batida seca ao passar em buracos",
                "Estalos ao virar o volante",
                "Instabilidade em curvas",
                "Folga perceptível na suspensão",
            ),
        ),
        action=RecommendedAction(
            steps=(
                "Elevar o veículo com segurança",
                "Localizar a bieleta na barra estabilizadora",
                "Remover as porcas de fixação superior e inferior",
                "Retirar a bieleta antiga",
                "Instalar a nova bieleta com torque especificado",
                "Verificar alinhamento e folgas",
                "Testar em superfícies irregulares",
            ),
            complexity=Complexity.SIMPLE,
            tools=("Chaves combinadas 13mm e 15mm", "Chave Allen", "Torquímetro", "WD-40"),
            estimated_time="30-45 minutos",
        ),
        structured_prompt=StructuredPrompt(
            symptom="ruido_impacto",
            location="suspensao_dianteira",
            condition="irregularidade_pista",
            severity="media",
        ),
    ),
    "escapamento": DiagnosisRecord(
        id="escapamento-001",
        zone=VehicleZone.EXHAUST,
        fault="Catalisador Obstruído",
        urgency=Urgency.MEDIUM,
        description=(
            "O catalisador apresenta obstrução ou deterioração, afetando a eficiência do motor "
            "e aumentando as emissões de poluentes."
        ),
        part=PartInfo(
            name="Catalisador",
            image=_PLACEHOLDER_IMAGE,
            function=(
                "Converte gases nocivos do escapamento (CO, HC, NOx) em gases menos prejudiciais "
                "através de reações químicas com metais preciosos."
            ),
            symptoms=(
                "Perda de potência do motor",
                "Aumento no consumo de combustível",
                "Fumaça escura no escapamento",
                "Cheiro forte de enxofre",
                "Luz de verificação do motor acesa",
            ),
        ),
        action=RecommendedAction(
            steps=(
                "Realizar diagnóstico eletrônico (OBD-II)",
                "Inspecionar visualmente o catalisador",
                "Verificar sensores de oxigênio",
                "Testar contrapressão do escapamento",
                "Substituir catalisador se necessário",
                "Limpar códigos de erro",
                "Realizar teste de emissões",
            ),
            complexity=Complexity.COMPLEX,
            tools=(
                "Scanner OBD-II",
                "Elevador automotivo",
                "Chaves de boca",
                "Manômetro de contrapressão",
            ),
            estimated_time="2-3 horas",
        ),
        structured_prompt=StructuredPrompt(
            symptom="fumaca_ruido_escapamento",
            location="sistema_escapamento",
            condition="aceleracao",
            severity="media",
        ),
    ),
})

# Keyword -> diagnosis key. Order matters: first hit wins.
KEYWORDS: Mapping[str, str] = MappingProxyType({
    # brakes
    "freio": "freios",
    "frear": "freios",
    "pedal": "freios",
    "frenagem": "freios",
    "disco": "freios",
    "pastilha": "freios",
    "chiado": "freios",
    # engine
    "motor": "motor",
    "aquecendo": "motor",
    "temperatura": "motor",
    "superaquecendo": "motor",
    "vapor": "motor",
    "radiador": "motor",
    "arrefecimento": "motor",
    "quente": "motor",
    # suspension
    "barulho": "suspensao",
    "suspensão": "suspensao",
    "suspensao": "suspensao",
    "buraco": "suspensao",
    "batida": "suspensao",
    "amortecedor": "suspensao",
    "bieleta": "suspensao",
    "estalo": "suspensao",
    "irregularidade": "suspensao",
    # exhaust
    "escapamento": "escapamento",
    "fumaça": "escapamento",
    "fumaca": "escapamento",
    "ronco": "escapamento",
    "catalisador": "escapamento",
    "exaustão": "escapamento",
    "enxofre": "escapamento",
})
