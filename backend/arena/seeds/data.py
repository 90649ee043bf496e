TEAM_NAMES = [
    "Qarabağ",
    "Neftçi",
    "Sabah",
    "Zirə",
    "Turan Tovuz",
    "Səbail",
    "Kəpəz",
    "Sumqayıt",
    "Araz-Naxçıvan",
    "Şamaxı",
    "Qəbələ",
    "İmişli",
    "Mil-Muğan",
    "Karvan",
    "Şəmkir",
    "Bakı",
]

DEMO_TOURNAMENT_NAMES = {
    "league": "Polad Arena League",
    "cup": "Polad Arena Cup",
}
