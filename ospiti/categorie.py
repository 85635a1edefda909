"""
Categoria dell'ospite letta dalla lista importata.

La colonna può chiamarsi Kategorie, Kategori, Category o Categoria e il
valore può essere scritto in tedesco, turco, inglese o italiano: viene
ricondotto a una chiave canonica usata per scegliere il template e-mail.
"""

CHIAVI_CATEGORIA = ("kategorie", "kategori", "category", "categoria")

# chiave canonica -> etichette (de, tr, en, it)
ETICHETTE_CATEGORIA = {
    "protokol": ("Protokoll", "Protokol", "Protocol", "Protocollo"),
    "gasteliste": ("Gästeliste", "Davet Listesi", "Guest List", "Lista ospiti"),
    "diplomatik": ("Diplomatik", "Diplomatik", "Diplomatic", "Diplomatico"),
    "medien": ("Medien", "Medya", "Media", "Stampa"),
    "vip": ("VIP", "VIP", "VIP", "VIP"),
    "wirtschaft": ("Wirtschaft", "İş Dünyası", "Business", "Economia"),
    "wissenschaft": ("Wissenschaft", "Bilim", "Science", "Scienza"),
    "kultur": ("Kultur", "Kültür", "Culture", "Cultura"),
    "religion": ("Religion", "Din", "Religion", "Religione"),
    "politik": ("Politik", "Siyaset", "Politics", "Politica"),
    "sport": ("Sport", "Spor", "Sports", "Sport"),
    "andere": ("Andere", "Diğer", "Other", "Altro"),
}


def _norm(valore):
    return str(valore).strip().lower()


def categoria_grezza(dati_aggiuntivi):
    """Valore della colonna categoria (qualsiasi maiuscolo/minuscolo), '' se assente."""
    for chiave, valore in (dati_aggiuntivi or {}).items():
        if _norm(chiave) in CHIAVI_CATEGORIA and valore is not None:
            return str(valore).strip()
    return ""


def normalizza_categoria(valore):
    """
    Chiave canonica di una categoria.

    Prima confronto esatto con le etichette, poi per prefisso; altrimenti
    il valore in minuscolo con gli spazi sostituiti da '_'.
    """
    n = _norm(valore or "")
    if not n:
        return ""

    for chiave, etichette in ETICHETTE_CATEGORIA.items():
        if any(_norm(e) == n for e in etichette):
            return chiave

    for chiave, etichette in ETICHETTE_CATEGORIA.items():
        for etichetta in map(_norm, etichette):
            if etichetta.startswith(n) or n.startswith(etichetta):
                return chiave

    return "_".join(n.split())


def categoria_ospite(ospite):
    return normalizza_categoria(categoria_grezza(ospite.dati_aggiuntivi))


def scelte_categoria():
    """Scelte per i form (chiave, etichetta italiana)."""
    return [(chiave, etichette[3]) for chiave, etichette in ETICHETTE_CATEGORIA.items()]
