"""
App Eventi - eventi, aree di lavoro, edizioni, note e programma.

Gestisce:
- Eventi con proprietario e membri, evento corrente in sessione
- Aree (Categoria) e edizioni commerciali
- Note e scaletta della giornata
"""
