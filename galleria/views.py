"""
Views per app galleria.

Foto, video e PDF dell'evento corrente: lista filtrabile per tipo,
upload multiplo, download ed eliminazione.
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.db import transaction
from django.http import FileResponse, Http404
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_http_methods

from core.audit import registra_audit
from eventi.utils import richiedi_evento_corrente
from users.permissions import pagina_richiesta

from .forms import UploadForm
from .models import MediaFile

logger = logging.getLogger(__name__)


def _get_media(evento, pk):
    return get_object_or_404(MediaFile, pk=pk, evento=evento, is_active=True)


@login_required
@pagina_richiesta("galleria")
def galleria_view(request):
    evento = richiedi_evento_corrente(request)
    media = evento.media.filter(is_active=True).select_related("caricato_da")

    tipo = request.GET.get("tipo", "")
    if tipo in dict(MediaFile.TIPO_CHOICES):
        media = media.filter(tipo=tipo)
    else:
        tipo = ""

    context = {
        "evento": evento,
        "media": media,
        "tipo": tipo,
        "tipi": MediaFile.TIPO_CHOICES,
        "form": UploadForm(),
    }
    return render(request, "galleria/galleria.html", context)


@login_required
@pagina_richiesta("galleria")
@require_http_methods(["POST"])
def upload_view(request):
    evento = richiedi_evento_corrente(request)
    form = UploadForm(request.POST, request.FILES)
    if not form.is_valid():
        for errore in form.errors.get("files", []):
            messages.error(request, errore)
        return redirect("galleria:galleria")

    descrizione = form.cleaned_data["descrizione"]
    with transaction.atomic():
        caricati = [
            MediaFile.objects.create(
                evento=evento,
                file=file,
                nome_originale=file.name,
                mime_type=getattr(file, "content_type", "") or "",
                descrizione=descrizione,
                caricato_da=request.user,
                created_by=request.user,
                updated_by=request.user,
            )
            for file in form.cleaned_data["files"]
        ]

    registra_audit(
        request,
        "CREATE",
        "MediaFile",
        evento=evento,
        descrizione=f"Caricati {len(caricati)} file in galleria",
        metadata={"file": [m.nome_originale for m in caricati]},
    )
    logger.info(f"Galleria evento {evento.pk}: caricati {len(caricati)} file da {request.user}")
    messages.success(request, f"{len(caricati)} file caricati.")
    return redirect("galleria:galleria")


@login_required
@pagina_richiesta("galleria")
def download_view(request, pk):
    evento = richiedi_evento_corrente(request)
    media = _get_media(evento, pk)
    try:
        handle = media.file.open("rb")
    except FileNotFoundError:
        logger.error(f"File mancante nello storage: {media.file.name}")
        raise Http404("File non trovato")
    return FileResponse(handle, as_attachment=True, filename=media.nome_originale)


@login_required
@pagina_richiesta("galleria")
@require_http_methods(["POST"])
def delete_view(request, pk):
    evento = richiedi_evento_corrente(request)
    media = _get_media(evento, pk)
    if not media.puo_eliminare(request.user):
        raise PermissionDenied("Solo chi ha caricato il file o un amministratore può eliminarlo")

    nome = media.nome_originale
    media.file.delete(save=False)
    media.soft_delete(user=request.user)
    registra_audit(
        request,
        "DELETE",
        "MediaFile",
        id_entita=media.pk,
        evento=evento,
        descrizione=f"File '{nome}' eliminato dalla galleria",
    )
    messages.success(request, f"{nome} eliminato.")
    return redirect("galleria:galleria")
