# Overview: Flask CLI command groups for bootstrap, inspection, and demo data.

# backend/kmdash/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create tables (idempotent) and the default admin/manager/staff users.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system cleanup-sessions --retention-days 30
#   Delete expired or revoked session tokens older than the retention window.
#
# Users:
# - python -m flask users list [--all]
# - python -m flask users create --name "Siti" --email siti@konveksi.local --password "Password123" --role manager
# - python -m flask users deactivate siti@konveksi.local
#
# Permission table:
# - python -m flask perms list [--role staff]
# - python -m flask perms check staff analitik
#
# Demo data:
# - python -m flask seed demo
#   Suppliers, materials, lessons, SOPs, deliveries, production logs and wastes.

import random
from datetime import timedelta

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import (
    KnowledgeDocument,
    LessonLearned,
    Material,
    ProductionLog,
    ProductionWaste,
    Supplier,
    SupplierDelivery,
    User,
)
from .models.production import WASTE_CATEGORIES
from .permissions import (
    PERMISSION_KEYS,
    Role,
    ROLE_PERMISSIONS,
    get_granted_keys,
    get_permission_definition,
    has_permission,
    validate_permission_key,
)
from .services import auth_service, metrics_service, session_service
from .services.auth_service import PasswordValidationError
from .validation import ConflictError
from .time_utils import days_ago, today


DEFAULT_PASSWORD = "Password123"

DEFAULT_USERS = [
    ("Admin KM", "admin@konveksi.local", Role.ADMIN, "Owner", "Manajemen"),
    ("Siti Nurhaliza", "manager@konveksi.local", Role.MANAGER, "Manager Produksi", "Produksi"),
    ("Ahmad Wijaya", "staff@konveksi.local", Role.STAFF, "Staff Gudang", "Gudang"),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create all tables and the three default users (one per role).

    All passwords default to: "Password123"
    SECURITY: Change passwords immediately in production!
    """
    click.echo("START Initializing KM dashboard...")
    db.create_all()
    click.echo("PASS Tables created")

    click.echo("\nUSERS Creating default users...")
    for name, email, role, position, department in DEFAULT_USERS:
        try:
            auth_service.create_user(
                name=name,
                email=email,
                password=DEFAULT_PASSWORD,
                role=role.value,
                position=position,
                department=department,
            )
            click.echo(f"PASS Created user: {email} with role '{role.value}'")
        except ConflictError:
            click.echo(f"WARN  User '{email}' already exists, skipping...")
        except PasswordValidationError as e:
            click.echo(f"FAIL Password validation failed for '{email}': {str(e)}")

    click.echo("\n" + "=" * 60)
    click.echo("DONE KM dashboard initialized")
    click.echo("=" * 60)
    click.echo("\nDefault Credentials (CHANGE IN PRODUCTION!):")
    for _, email, role, _, _ in DEFAULT_USERS:
        click.echo(f"   {role.value:<8} -> {email} / {DEFAULT_PASSWORD}")
    click.echo("")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@system_group.command('cleanup-sessions')
@click.option('--retention-days', default=30, show_default=True, type=int)
@with_appcontext
def cleanup_sessions(retention_days):
    """Delete expired or revoked sessions older than the retention window."""
    deleted = session_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"PASS Deleted {deleted} session tokens")


# =============================================================================
# USERS
# =============================================================================

@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--name', prompt=True)
@click.option('--email', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice([r.value for r in Role]), default=Role.STAFF.value, show_default=True)
@click.option('--position', default=None)
@click.option('--department', default=None)
@with_appcontext
def create_user_cli(name, email, password, role, position, department):
    """Create a user."""
    try:
        user = auth_service.create_user(
            name=name,
            email=email,
            password=password,
            role=role,
            position=position,
            department=department,
        )
    except (ConflictError, PasswordValidationError) as e:
        click.echo(f"FAIL {str(e)}")
        return

    click.echo(f"PASS Created user {user.email} (ID: {user.id}) with role '{user.role}'")


@users_group.command('list')
@click.option('--all', 'include_inactive', is_flag=True, help='Include deactivated users')
@with_appcontext
def list_users(include_inactive):
    """List users with role and active status."""
    users = auth_service.list_users(include_inactive=include_inactive)
    if not users:
        click.echo("No users found. Run 'python -m flask system init'.")
        return

    click.echo(f"\n{'ID':<5} {'Email':<32} {'Name':<24} {'Role':<8} Active")
    click.echo("-" * 80)
    for user in users:
        click.echo(
            f"{user.id:<5} {user.email:<32} {user.name[:24]:<24} {user.role:<8} "
            f"{'yes' if user.is_active else 'no'}"
        )


@users_group.command('deactivate')
@click.argument('email')
@with_appcontext
def deactivate_user_cli(email):
    """Deactivate a user and revoke their sessions."""
    user = auth_service.find_user_by_email(email)
    if not user:
        click.echo(f"FAIL User '{email}' not found")
        return

    auth_service.update_user(user.id, {"is_active": False})
    click.echo(f"PASS Deactivated {user.email}")


# =============================================================================
# PERMISSIONS
# =============================================================================

@click.group('perms')
def perms_group():
    """Inspect the role permission table."""


@perms_group.command('list')
@click.option('--role', default=None, help='Only this role')
@with_appcontext
def list_permissions_cli(role):
    roles = [Role.parse(role)] if role else list(Role)

    click.echo(f"\n{'Permission':<14} " + " ".join(f"{r.value:<8}" for r in roles))
    click.echo("-" * (15 + 9 * len(roles)))
    for key in PERMISSION_KEYS:
        marks = " ".join(f"{'yes' if ROLE_PERMISSIONS[r][key] else '-':<8}" for r in roles)
        click.echo(f"{key:<14} {marks}")

    click.echo("")
    for r in roles:
        click.echo(f"{r.value}: {', '.join(get_granted_keys(r))}")


@perms_group.command('check')
@click.argument('role')
@click.argument('permission_key')
@with_appcontext
def check_permission_cli(role, permission_key):
    """Check whether a role (unknown roles act as staff) has a permission."""
    if not validate_permission_key(permission_key):
        click.echo(f"FAIL Unknown permission '{permission_key}' (known: {', '.join(PERMISSION_KEYS)})")
        return

    resolved = Role.parse(role)
    name = get_permission_definition(permission_key)["name"]
    if has_permission(resolved, permission_key):
        click.echo(f"PASS Role '{resolved.value}' HAS permission '{permission_key}' ({name})")
    else:
        click.echo(f"FAIL Role '{resolved.value}' DOES NOT HAVE permission '{permission_key}' ({name})")


# =============================================================================
# DEMO DATA
# =============================================================================

@click.group('seed')
def seed_group():
    """Demo data for a garment convection."""


DEMO_SUPPLIERS = [
    ("PT Tekstil Nusantara", "Kain Katun Premium", "021-5551234", "Jl. Industri No. 15, Tangerang",
     9.2, 8.5, 9.0,
     "Supplier terpercaya untuk kain katun berkualitas tinggi. Konsisten dalam pengiriman tepat waktu."),
    ("CV Benang Jaya", "Benang Jahit Polyester", "021-5552345", "Jl. Raya Bogor KM 25, Jakarta Timur",
     8.8, 9.0, 8.9,
     "Response time cepat dan stok selalu tersedia. Kadang variasi warna minor antar batch."),
    ("Toko Aksesoris Mandiri", "Kancing dan Aksesoris", "021-5553456", "Pasar Tanah Abang Blok B No. 88",
     7.5, 8.0, 7.8,
     "Harga terjangkau. Perlu QC lebih ketat untuk kancing plastik; kancing logam berkualitas baik."),
    ("PT Fabric Indonesia", "Kain Drill & Canvas", "022-7771234", "Jl. Raya Cimahi No. 45, Bandung",
     8.9, 7.8, 8.4,
     "Kualitas kain drill sangat baik. Lead time 7-10 hari, cocok untuk order terencana."),
    ("UD Polyester Mulia", "Kain Polyester", "031-8881234", "Jl. Industri Raya No. 120, Surabaya",
     8.2, 8.8, 8.5,
     "Polyester dengan harga kompetitif. Perlu tes shrinkage sebelum produksi massal."),
]

# (supplier index, name, category, stock, unit, price, threshold, explicit, tacit)
DEMO_MATERIALS = [
    (0, "Kain Katun Combed 30s", "Bahan Utama", 250, "meter", 35000, 50,
     "SOP: Cuci sample sebelum cutting untuk cek shrinkage. Simpan di ruang AC.",
     "Lebih mudah dijahit dibanding 24s. Tarikan benang terlalu kencang bikin berkerut."),
    (3, "Kain Drill Tebal", "Bahan Utama", 180, "meter", 42000, 40,
     "SOP: Gunakan jarum mesin nomor 16. Pre-wash wajib untuk produk celana.",
     "Keras di mesin jahit lama. Ganti jarum setiap 5 potong celana."),
    (1, "Benang Jahit Polyester 40/2", "Bahan Pendukung", 85, "cone", 18000, 20,
     "SOP: Simpan di tempat kering. 1 cone untuk sekitar 15 kemeja standar.",
     "Kalau putus-putus cek bobbin dulu, biasanya masalahnya di situ."),
    (2, "Kancing Baju Plastik 14mm", "Aksesoris", 5000, "pcs", 150, 1000,
     "SOP: QC sebelum pasang, cek retak dan lubang. 1 kemeja = 7 kancing.",
     None),
    (4, "Kain Polyester Dry-fit", "Bahan Utama", 25, "meter", 38000, 30,
     "SOP: Jangan setrika langsung dengan suhu tinggi. Gunakan kain pelapis.",
     "Licin, susah dipotong tanpa pemberat. Pakai stretch stitch biar gak pecah."),
]

DEMO_LESSONS = [
    ("Teknik Pencegahan Shrinkage pada Katun Combed", "Eksternalisasi", "Produksi", "Tinggi", 2500000, 0,
     "Baju menyusut setelah dicuci pertama kali, terutama katun combed 30s.",
     "Pre-wash semua kain katun sebelum cutting: rendam air hangat 30 menit, keringkan, setrika."),
    ("Optimasi Penggunaan Benang untuk Efisiensi Cost", "Kombinasi", "Efisiensi", "Tinggi", 3200000, 2,
     "Biaya benang naik 15% dalam 3 bulan terakhir.",
     "Gabungkan data historis pemakaian dengan setting tension optimal dan checklist maintenance mesin."),
    ("Mengatasi Kain Drill yang Keras di Mesin Lama", "Sosialisasi", "Produksi", "Sedang", 1500000, 1,
     "Jarum sering patah saat menjahit drill tebal di mesin berusia 5+ tahun.",
     "Sharing operator senior: jarum nomor 18 heavy duty dan kecepatan mesin 60-70%."),
    ("Internalisasi SOP Quality Control Kancing", "Internalisasi", "Kualitas", "Tinggi", 1800000, 3,
     "8% produk jadi lolos QC dengan kancing cacat.",
     "Training QC kancing 2 minggu dengan checklist visual OK vs NG."),
]

DEMO_DOCUMENTS = [
    ("SOP Cutting Kain Katun", "SOP", "Produksi",
     "Langkah cutting: cek shrinkage, susun lapisan maksimal 40, gunakan rotary cutter."),
    ("SOP Penerimaan Barang dari Supplier", "SOP", "Gudang",
     "Cek PO, hitung kuantitas, QC warna dan cacat, catat di sistem."),
    ("Panduan Mesin Jahit High Speed", "Tutorial", "Produksi",
     "Setting tension, perawatan rutin, dan troubleshooting masalah umum."),
]

PRODUCT_TYPES = ("Kemeja", "Celana", "Jaket", "Polo Shirt", "Seragam")


@seed_group.command('demo')
@click.option('--seed', 'rng_seed', default=42, show_default=True, type=int, help='Random seed')
@with_appcontext
def seed_demo(rng_seed):
    """
    Load demo data. Requires 'system init' first (uses its users).

    Safe to run once; aborts when materials already exist.
    """
    if db.session.query(Material).count():
        click.echo("WARN  Materials already exist, skipping demo seed.")
        return

    users = db.session.query(User).filter(User.is_active.is_(True)).order_by(User.id).all()
    if not users:
        click.echo("FAIL No users found. Run 'python -m flask system init' first.")
        return
    admin = users[0]
    staff = [u for u in users if u.role_enum is Role.STAFF] or [admin]

    rng = random.Random(rng_seed)

    click.echo("LIST Creating suppliers...")
    suppliers = []
    for name, specialty, phone, address, q, s, r, insight in DEMO_SUPPLIERS:
        supplier = Supplier(
            name=name, specialty=specialty, phone=phone, address=address,
            quality_score=q, speed_score=s, reliability_score=r, kbv_insight=insight,
            total_orders=0, on_time_deliveries=0, created_by_user_id=admin.id,
        )
        supplier.is_recommended = supplier.is_strategic_partner
        suppliers.append(supplier)
    db.session.add_all(suppliers)
    db.session.flush()

    click.echo("LIST Creating materials...")
    materials = []
    for idx, name, category, stock, unit, price, threshold, explicit, tacit in DEMO_MATERIALS:
        materials.append(Material(
            supplier_id=suppliers[idx].id, name=name, category=category,
            stock_quantity=stock, unit=unit, price_per_unit=price,
            threshold_min=threshold, reorder_point=threshold * 1.5,
            explicit_knowledge=explicit, tacit_knowledge=tacit,
            last_updated_by_user_id=admin.id, last_restocked_at=days_ago(rng.randint(3, 20)),
        ))
    db.session.add_all(materials)
    db.session.flush()

    click.echo("LIST Creating lessons learned...")
    for title, seci, category, impact, savings, material_idx, problem, solution in DEMO_LESSONS:
        db.session.add(LessonLearned(
            title=title, seci_type=seci, category=category, impact_level=impact,
            estimated_savings=savings, material_id=materials[material_idx].id,
            problem_description=problem, solution=solution, status="Published",
            author_id=rng.choice(users).id,
            view_count=rng.randint(20, 60), likes_count=rng.randint(5, 20),
            created_at=days_ago(rng.randint(1, 40)),
        ))

    click.echo("LIST Creating knowledge base...")
    for title, doc_type, category, content in DEMO_DOCUMENTS:
        db.session.add(KnowledgeDocument(
            title=title, doc_type=doc_type, category=category, content=content,
            status="Published", created_by_user_id=admin.id, published_at=days_ago(60),
            updated_at=days_ago(rng.randint(5, 120)),
        ))

    click.echo("LIST Creating deliveries...")
    for n in range(12):
        supplier = rng.choice(suppliers)
        order_date = today() - timedelta(days=rng.randint(10, 150))
        expected = order_date + timedelta(days=7)
        delay = rng.choice((-1, 0, 0, 0, 1, 3))
        delivery = SupplierDelivery(
            supplier_id=supplier.id, po_number=f"PO-DEMO-{n + 1:03d}",
            order_date=order_date, expected_delivery_date=expected,
            actual_delivery_date=expected + timedelta(days=delay),
            quantity_ordered=100, quantity_delivered=100,
            color_consistency=rng.choice(("Excellent", "Good", "Good", "Fair")),
            material_quality=rng.choice(("Excellent", "Good", "Good")),
            defect_rate=round(rng.uniform(0, 4), 1),
            on_time_delivery=delay <= 0, delay_days=delay, status="Inspected",
        )
        db.session.add(delivery)
        supplier.total_orders += 1
        supplier.on_time_deliveries += 1 if delay <= 0 else 0
        supplier.last_delivery_date = delivery.actual_delivery_date

    click.echo("LIST Creating production logs and wastes...")
    for _ in range(30):
        material = rng.choice(materials)
        used = rng.randint(20, 120)
        waste = round(used * rng.uniform(0.03, 0.18), 2)
        db.session.add(ProductionLog(
            production_date=today() - timedelta(days=rng.randint(1, 60)),
            material_id=material.id, quantity_used=used,
            product_type=rng.choice(PRODUCT_TYPES), quantity_produced=rng.randint(20, 100),
            waste_quantity=waste,
            waste_percentage=metrics_service.waste_percentage(waste, used),
            worker_id=rng.choice(staff).id,
        ))
    for _ in range(15):
        material = rng.choice(materials)
        quantity = rng.randint(1, 20)
        db.session.add(ProductionWaste(
            material_id=material.id, waste_date=today() - timedelta(days=rng.randint(1, 30)),
            quantity=quantity, unit=material.unit,
            waste_category=rng.choice(WASTE_CATEGORIES),
            waste_reason="Sisa potongan pattern",
            is_preventable=rng.random() < 0.5,
            cost_impact=quantity * (material.price_per_unit or 0),
            recorded_by_user_id=rng.choice(staff).id,
        ))

    db.session.commit()
    click.echo("\nDONE Demo data loaded")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
    app.cli.add_command(seed_group)
