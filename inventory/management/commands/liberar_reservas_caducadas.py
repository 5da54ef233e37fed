from django.core.management.base import BaseCommand
from inventory.reservations import liberar_reservas_caducadas


class Command(BaseCommand):
    help = "Release PENDIENTE stock reservations older than the configured TTL"

    def add_arguments(self, parser):
        parser.add_argument("--limit", type=int, default=None, help="Max reservations to process (1-500)")
        parser.add_argument(
            "--ttl-hours", type=int, default=None, help="Age in hours after which a reservation is stale"
        )
        parser.add_argument("--motivo", default=None, help="Reason stored on released reservations")
        parser.add_argument("--triggered-by", type=int, default=None, help="User id recorded as the trigger")
        parser.add_argument("--dry-run", action="store_true", help="Only count stale reservations")

    def handle(self, *args, **options):
        resultado = liberar_reservas_caducadas(
            limit=options["limit"],
            ttl_hours=options["ttl_hours"],
            motivo=options["motivo"],
            triggered_by=options["triggered_by"],
            dry_run=options["dry_run"],
        )
        for error in resultado["errores"]:
            self.stderr.write(f"Reserva {error['reserva_id']}: {error['error']}")

        summary = (
            f"Stale reservations found: {resultado['encontrados']}, released: {resultado['liberados']}, "
            f"errors: {len(resultado['errores'])} (cutoff {resultado['cutoff'].isoformat()})"
        )
        if options["dry_run"]:
            summary = f"[dry-run] {summary}"
        style = self.style.WARNING if resultado["errores"] else self.style.SUCCESS
        self.stdout.write(style(summary))
