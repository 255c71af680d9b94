"""
Closed category taxonomy for budget proposals.

Each key is a category label (a ministry, commission or cross-cutting
bucket) and its value lists the agencies, funds and state enterprises whose
budgets are reviewed under it. Only the keys are valid ``category`` values;
the agency lists are included in the extraction prompt so the oracle can map
an agency mentioned in a proposal to its category.

The taxonomy is static data. Changing it changes the set of records the
ValidationGate accepts.
"""

from typing import Dict, List, Tuple

NEW_CAUCUS_PROPOSAL = "黨團協商新提案"

CATEGORIES: Dict[str, List[str]] = {
    "通案刪減": ["通案刪減"],
    "內政部": [
        NEW_CAUCUS_PROPOSAL,
        "內政部",
        "警政署及所屬",
        "消防署及所屬",
        "國土管理署及所屬",
        "移民署",
        "國家公園署及所屬",
        "營建建設基金",
        "國家住宅及都市更新中心",
        "空中勤務總隊",
        "中央警察大學",
        "建築研究所",
        "消防署及所屬部分",
        "國土永續發展基金",
        "新住民發展基金",
    ],
    "衛福部": [
        NEW_CAUCUS_PROPOSAL,
        "衛生福利部",
        "食品藥物管理署",
        "社會及家庭署",
        "國民健康署",
        "中央健康保險署",
        "疾病管制署",
        "衛生福利特別收入基金",
        "國家中醫藥研究所",
        "全民健康保險基金",
        "醫療藥品基金",
        "國民年金保險基金",
        "管制藥品製藥工廠作業基金",
    ],
    "交通部": [
        NEW_CAUCUS_PROPOSAL,
        "公路局",
        "交通部",
        "民用航空局",
        "觀光署",
        "航港局",
        "中央氣象署",
        "臺灣鐵路公司",
        "鐵道局",
        "公共工程委員會",
        "桃園國際機場",
        "國道公路建設管理基金",
        "臺灣港務公司",
        "中華郵政",
        "運輸安全調查委員會",
        "運輸研究所",
        "觀光發展基金",
    ],
    "經濟部": [
        NEW_CAUCUS_PROPOSAL,
        "經濟部",
        "台灣電力公司",
        "台灣中油股份有限公司",
        "台灣自來水公司",
        "經濟特別收入基金",
        "台灣糖業股份有限公司",
        "水利署",
        "經濟作業基金",
        "產業發展署",
        "中小及新創企業署",
        "水資源作業基金",
        "商業發展署",
        "能源署",
        "標準檢驗局",
        "地質調查及礦業管理中心",
        "產業園區管理局及所屬",
        "國際貿易署",
        "核能發電後端營運基金",
        "智慧財產局",
    ],
    "國防部": [
        NEW_CAUCUS_PROPOSAL,
        "國防部",
        "陸軍司令部",
        "國軍生產及服務作業基金",
        "海軍司令部",
        "空軍司令部",
        "全民防衛動員署",
        "軍醫局",
        "國軍老舊眷村改建基金",
        "政治作戰局",
        "軍備局",
        "國軍營舍及設施改建基金",
        "資通電軍指揮部",
        "參謀本部",
        "憲兵指揮部",
        "國防大學",
        "國防醫學院軍事教育基金",
        "軍事情報局",
        "中正國防幹部預備學校",
        "主計局",
        "主計處",
        "電訊發展室",
    ],
    "勞動部": [
        NEW_CAUCUS_PROPOSAL,
        "勞動部",
        "勞動力發展署",
        "職業安全衛生署",
        "勞工保險局",
        "勞動及職業安全衛生研究所",
        "勞動基金運用局",
        "職業災害預防及重建中心",
    ],
    "環境部": [
        NEW_CAUCUS_PROPOSAL,
        "環境部",
        "環境管理署",
        "資源循環署",
        "氣候變遷署",
        "基金預算",
        "化學物質管理署",
        "國家環境研究院",
        "環境部轄下基金會",
    ],
    "教育部": [
        NEW_CAUCUS_PROPOSAL,
        "教育部",
        "體育署",
        "國民及學前教育署",
        "國立大學校務基金",
        "國家運動訓練中心",
        "教育部所屬機構作業基金",
        "國家運動科學中心",
        "國家教育研究院",
        "教育部轄下醫院",
        "青年發展署",
        "國家圖書館",
    ],
    "行政院": [
        NEW_CAUCUS_PROPOSAL,
        "行政院",
        "人事行政總處",
        "主計總處",
        "國家發展基金",
        "審計部",
        "促進轉型正義基金",
        "離島建設基金",
        "花東地區永續發展基金",
    ],
    "NCC": [
        NEW_CAUCUS_PROPOSAL,
        "通訊傳播監督管理基金",
        "國家通訊傳播委員會",
        "有線廣播電視事業發展基金預算",
    ],
    "文化部": [
        NEW_CAUCUS_PROPOSAL,
        "文化部",
        "文化資產局",
        "影視及流行音樂產業局",
        "文化內容策進院",
        "國家表演藝術中心",
        "文化發展基金",
        "臺灣文學館",
        "國立臺灣工藝研究發展中心",
        "國家人權博物館",
        "國家電影及視聽文化中心",
        "臺灣博物館",
        "臺灣史前文化博物館",
        "傳統藝術中心",
        "國父紀念館",
        "Taiwan Plus",
        "中正紀念堂",
        "歷史博物館",
    ],
    "原民會": [NEW_CAUCUS_PROPOSAL, "原住民族委員會", "原住民族發展基金"],
    "中研院": [NEW_CAUCUS_PROPOSAL, "中央研究院"],
    "中選會": [NEW_CAUCUS_PROPOSAL, "中央選舉委員會"],
    "僑委會": [NEW_CAUCUS_PROPOSAL, "僑務委員會"],
    "公平會": [NEW_CAUCUS_PROPOSAL, "公平交易委員會", "反托拉斯基金"],
    "前瞻計畫": ["前瞻基礎建設計畫"],
    "司法院": [NEW_CAUCUS_PROPOSAL, "司法院", "法律扶助基金會", "地方法院"],
    "國安局": ["國家安全局"],
    "國發會": [NEW_CAUCUS_PROPOSAL, "國家發展委員會"],
    "國科會": [
        "國家科學及技術委員會及所屬",
        "國家太空中心",
        "國家災害防救科技中心",
        "國家科學及技術委員會及",
    ],
    "外交部": [NEW_CAUCUS_PROPOSAL, "外交部", "僑務委員會", "領事事務局"],
    "客委會": [NEW_CAUCUS_PROPOSAL, "客家委員會"],
    "故宮": [NEW_CAUCUS_PROPOSAL, "國立故宮博物院"],
    "數發部": [NEW_CAUCUS_PROPOSAL, "數位發展部", "數位產業署", "資通安全署"],
    "財政部": [
        NEW_CAUCUS_PROPOSAL,
        "財政部",
        "公股銀行",
        "賦稅署",
        "中央銀行",
        "臺灣菸酒公司",
        "國庫署",
        "國有財產署",
        "國營金融事業機構",
        "關務署",
        "地方國稅局",
        "財政資訊中心",
        "印刷廠",
    ],
    "核安會": [NEW_CAUCUS_PROPOSAL, "核能安全委員會", "原子能科技研究院"],
    "法務部": [
        NEW_CAUCUS_PROPOSAL,
        "法務部",
        "矯正署",
        "調查局",
        "臺灣高等檢察署",
        "廉政署",
        "最高檢察署",
        "法醫研究所",
        "行政執行署及所屬",
        "毒品防制基金",
        "矯正署及所屬",
        "法務部矯正機關作業基金",
        "臺灣宜蘭地方檢察署",
        "臺灣臺北地方檢察署",
    ],
    "海委會": [
        NEW_CAUCUS_PROPOSAL,
        "海洋委員會",
        "海巡署及所屬",
        "海洋保育署",
        "國家海洋研究院",
        "海洋污染防治基金",
    ],
    "監察院": [NEW_CAUCUS_PROPOSAL, "監察院"],
    "立法院": ["立法院"],
    "總統府": [NEW_CAUCUS_PROPOSAL, "總統府", "國家安全會議", "國史館"],
    "考試院": [
        NEW_CAUCUS_PROPOSAL,
        "考試院",
        "考選部",
        "公務人員保障暨培訓委員會",
        "銓敘部",
        "公務人員退休撫卹基金管理局",
        "國家文官學院",
    ],
    "農業部": [
        "農業部",
        NEW_CAUCUS_PROPOSAL,
        "農業特別收入基金",
        "農業作業基金",
        "農田水利事業作業基金",
        "農民退休基金",
    ],
    "退輔會": ["國軍退除役官兵輔導委員會"],
    "金管會": [
        NEW_CAUCUS_PROPOSAL,
        "金融監督管理委員會",
        "銀行局",
        "證券期貨局",
        "檢查局",
        "保險局",
        "金融監督管理基金",
        "中央存款保險公司",
    ],
    "陸委會": [NEW_CAUCUS_PROPOSAL, "大陸委員會"],
    "黨產會": [NEW_CAUCUS_PROPOSAL, "不當黨產處理委員會"],
}

CATEGORY_NAMES: Tuple[str, ...] = tuple(CATEGORIES)


def is_known_category(category: str) -> bool:
    """Return True if ``category`` is one of the taxonomy labels."""
    return category in CATEGORIES


def describe_taxonomy() -> str:
    """
    Render the taxonomy for the extraction prompt.

    Returns:
        str: One line per category, ``label：agency、agency、...``.
    """
    return "\n".join(
        f"{label}：{'、'.join(agencies)}" for label, agencies in CATEGORIES.items()
    )
