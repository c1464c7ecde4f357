from config.schema import AppConfig, RuleHostConfig
from models.catalog import Catalog
from models.course import Course
from models.structure import Field


def default_catalog() -> Catalog:
    """Kurskatalog des Hans-Carossa-Gymnasiums (Qualifikationsphase, 4 Semester).

    Tags:
      lk    – als Leistungskurs (1./2. LF) wählbar
      lang  – Fremdsprache bzw. Deutsch
      nawi  – Naturwissenschaft

    Ensemblemusik, Zusatz- und Seminarkurse sind auf 2 einbringbare
    Semester begrenzt. Sport-Theorie beginnt erst im 3. Semester,
    Ski und Snowboard ist nur im 2. Semester wählbar.
    """
    return Catalog.build(
        fields=[
            Field(name="1. AF", courses=[
                Course.new("Deutsch", "de", ["lang", "lk"]),
                Course.new("Englisch", "en", ["lang", "lk"]),
                Course.new("Französisch", "frz", ["lang", "lk"]),
                Course.new("Latein", "lat", ["lang"]),
                Course.new("Russisch", "rus", ["lang"]),
                Course.new("Spanisch", "sp", ["lang"]),
                Course.new("Musik", "mus", ["lk"]),
                Course.new("Kunst", "kun", ["lk"]),
                Course.new("Darstellendes Spiel", "ds"),
            ]),
            Field(name="2. AF", courses=[
                Course.new("Politikwissenschaft", "pw", ["lk"]),
                Course.new("Geschichte", "ges", ["lk"]),
                Course.new("Geographie", "geo", ["lk"]),
                Course.new("Philosophie", "philo"),
            ]),
            Field(name="3. AF", courses=[
                Course.new("Mathematik", "mat", ["lk"]),
                Course.new("Physik", "phy", ["lk", "nawi"]),
                Course.new("Chemie", "ch", ["lk", "nawi"]),
                Course.new("Biologie", "bio", ["lk", "nawi"]),
                Course.new("Informatik", "inf"),
            ]),
            Field(name="Sport", courses=[
                Course.new("Sport", "spo"),
                Course.new("Sport-Theorie", "spo-th").with_offset(2),
            ]),
            Field(name="Ensemblemusik", max_usable=2, courses=[
                Course.new("Chor", "chor"),
                Course.new("Bläser", "blaeser"),
            ]),
            Field(name="Zusatzkurse", max_usable=2, courses=[
                Course.new("CCC", "ccc"),
                Course.new("Debating", "debating"),
                Course.new("Digitale Welten", "dw").with_semesters(2),
            ]),
            Field(name="Seminarkurse", max_usable=2, courses=[
                Course.new("Neurowissenschaften", "neuro").with_semesters(2),
                Course.new("Doping", "doping").with_semesters(2),
                Course.new("Finanzmathematik", "fima").with_semesters(2),
            ]),
            Field(name="Sport", courses=[
                Course.new("Ski und Snowboard", "ski").with_semesters(1).with_offset(1),
            ]),
        ],
        total_semesters=4,
        school="Hans-Carossa-Gymnasium",
        version="1.0",
    )


def default_app_config() -> AppConfig:
    """Default-Konfiguration: eingebauter Katalog und eingebaute Regeln."""
    return AppConfig(rule_host=RuleHostConfig())


# ─── REGELN ───
# Verpflichtungen für die Qualifikationsphase (Berliner Oberstufe).
# Jede Regel ist eine Lua-Funktion ohne Seiteneffekte; Rückgabe true/false.

DEFAULT_RULES = """\
rule("Deutsch 4 Semester", function(sel)
    return sel.semesters("de") == 4
end)

rule("Mathematik 4 Semester", function(sel)
    return sel.semesters("mat") == 4
end)

rule("Eine Fremdsprache 4 Semester", function(sel)
    for _, c in ipairs(sel.by_tag("lang")) do
        if c.id ~= "de" and c.selected == 4 then return true end
    end
    return false
end)

rule("Eine Naturwissenschaft 4 Semester", function(sel)
    for _, c in ipairs(sel.by_tag("nawi")) do
        if c.selected == 4 then return true end
    end
    return false
end)

rule("Sport 4 Semester", function(sel)
    return sel.semesters("spo") == 4
end)

rule("Zwei Leistungsfächer gewählt", function(sel)
    return sel.exam_holder("LF1") ~= nil and sel.exam_holder("LF2") ~= nil
end)

rule("Fünf Prüfungsfächer vergeben", function(sel)
    local n = 0
    for _ in pairs(sel.exams()) do n = n + 1 end
    return n == 5
end)

rule("Prüfungsfächer über alle 4 Semester belegt", function(sel)
    for _, id in pairs(sel.exams()) do
        if sel.semesters(id) < 4 then return false end
    end
    return true
end)

rule("Anzahl einzubringender Kurse <= 40", function(sel)
    local total = 0
    for i = 1, #sel.fields() do total = total + sel.usable(i) end
    return total <= 40
end, { optional = true })
"""
